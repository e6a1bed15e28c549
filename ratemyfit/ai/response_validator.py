"""
Validation of outfit analyses before they reach the UI.

Errors make a draft unusable (the recovery parser replaces the offending
fields); warnings are cosmetic and only reported.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from pydantic import ValidationError

from config.settings import RecoveryConfig
from ratemyfit.models import StyleAnalysis

NICE_WORDS = (
    "nice",
    "good",
    "okay",
    "decent",
    "fine",
    "pleasant",
    "lovely",
    "acceptable",
    "appropriate",
    "suitable",
    "workable",
    "pretty",
)

GRAMMAR_CHECKS = [
    re.compile(r"[ \t]{2,}"),  # Double spaces
    re.compile(r"\.\s+[a-z]"),  # Lowercase sentence start
    re.compile(r"[a-zA-Z]\s*$"),  # Missing terminal punctuation
    re.compile(r"\b(\w+)\s+\1\b", re.I),  # Repeated words
    re.compile(r"\*\*:\*\*|\*\*\s*\*\*"),  # Malformed markdown
    re.compile(r"\s:\s"),  # Standalone colons
    re.compile(r"[.!?]{2,}"),  # Multiple punctuation
]


@dataclass
class ValidationReport:
    """Outcome of validating one analysis draft."""

    is_valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    # Per-field verdicts so a fallback can keep the good parts
    score_ok: bool = True
    feedback_ok: bool = True
    suggestions_ok: bool = True
    style_analysis_ok: bool = True


def has_grammar_issues(text: str) -> bool:
    if not text:
        return True
    return any(check.search(text) for check in GRAMMAR_CHECKS)


def is_too_nice(feedback: str) -> bool:
    """Roast feedback that is short or full of pleasantries."""
    lower = (feedback or "").lower()
    nice_count = sum(1 for word in NICE_WORDS if word in lower)
    return nice_count > 2 or len(lower) < 200


def is_valid_score(score: Any) -> bool:
    return isinstance(score, int) and not isinstance(score, bool) and 1 <= score <= 10


def parse_style_analysis(data: Any) -> Optional[StyleAnalysis]:
    """Validate a styleAnalysis object; None if absent or malformed."""
    if isinstance(data, StyleAnalysis):
        return data
    if not isinstance(data, dict):
        return None
    try:
        return StyleAnalysis.model_validate(data)
    except ValidationError:
        return None


def validate_analysis(
    score: Any,
    feedback: Any,
    suggestions: Any,
    style_analysis: Any = None,
    feedback_mode: str = "normal",
    config: Optional[RecoveryConfig] = None,
) -> ValidationReport:
    """
    Validate the parts of an outfit analysis.

    Rules: integer score in 1-10, feedback of at least
    ``min_feedback_length`` characters, at least one suggestion, every
    suggestion at least ``min_suggestion_length`` characters, and in normal
    mode a well-formed style analysis.
    """
    config = config or RecoveryConfig()
    report = ValidationReport(is_valid=True)

    if not is_valid_score(score):
        report.score_ok = False
        report.errors.append("Score must be an integer between 1 and 10")

    if not isinstance(feedback, str) or len(feedback.strip()) < config.min_feedback_length:
        report.feedback_ok = False
        report.errors.append(
            f"Feedback must be at least {config.min_feedback_length} characters long"
        )
    else:
        if "**:**" in feedback or "****" in feedback:
            report.warnings.append("Malformed markdown formatting detected in feedback")
        if not any(f"{s}:" in feedback or f"**{s}" in feedback for s in ("Style", "Color", "Fit", "Overall")):
            report.warnings.append("Feedback lacks expected section structure")
        if has_grammar_issues(feedback):
            report.warnings.append("Feedback may contain grammar or formatting issues")
        if feedback_mode == "roast" and is_too_nice(feedback):
            report.warnings.append("Roast feedback is too gentle")

    if not isinstance(suggestions, list) or not suggestions:
        report.suggestions_ok = False
        report.errors.append("At least one suggestion is required")
    else:
        for i, suggestion in enumerate(suggestions, 1):
            if not isinstance(suggestion, str) or len(suggestion.strip()) < config.min_suggestion_length:
                report.suggestions_ok = False
                report.errors.append(f"Suggestion {i} is too short or empty")
            elif re.match(r"^\d+\.|^[-*]", suggestion):
                report.warnings.append(f"Suggestion {i} still contains list markers")
        if len(set(map(str, suggestions))) < len(suggestions):
            report.warnings.append("Duplicate suggestions detected")

    if feedback_mode != "roast" and parse_style_analysis(style_analysis) is None:
        report.style_analysis_ok = False
        report.errors.append("Style analysis is missing or malformed")

    report.is_valid = not report.errors
    return report
