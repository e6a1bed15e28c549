"""
Response Recovery Parser

Turns whatever the vision model said into a valid AnalyzeOutfitResponse.
The text moves through these states, each tried once:

    policy check  -> refusal phrase found: fully synthetic response
    strict JSON   -> fenced block or brace-balanced object with
                     score / feedback / suggestions
    relaxed       -> fields pulled out individually with regexes
    validation    -> score 1-10, feedback >= 20 chars, suggestions present,
                     style analysis present in normal mode
    fallback      -> failing fields replaced with synthetic content

``parse`` never raises and always returns a schema-valid response.
"""

import json
import random
import re
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional

from rich.console import Console
from rich.markup import escape

from config.settings import RecoveryConfig
from ratemyfit.errors import MalformedResponseError
from ratemyfit.models import AnalyzeOutfitResponse

from .fallback import BRUTAL_PREFIXES, FallbackGenerator
from .response_validator import is_too_nice, parse_style_analysis, validate_analysis
from .text_processor import (
    clean_feedback,
    extract_score,
    extract_suggestions,
    format_suggestions,
    strip_score_mentions,
    strip_suggestion_section,
)

console = Console()

# =============================================================================
# CONTENT POLICY REFUSALS
# =============================================================================

_APOS = "['’]"

POLICY_PATTERNS = [
    re.compile(rf"\bI can{_APOS}?t help with identifying", re.I),
    re.compile(r"\bI (?:cannot|can not|can't|can’t) (?:identify|analy[sz]e)", re.I),
    re.compile(
        rf"\bI{_APOS}?m (?:sorry,? (?:but )?)?(?:unable|not able) to (?:help|assist|identify|analy[sz]e)",
        re.I,
    ),
    re.compile(rf"\bI{_APOS}?m sorry,? but I (?:can{_APOS}?t|cannot)", re.I),
    re.compile(r"\b(?:against|violates?) (?:my|the|our) (?:content |usage )?polic", re.I),
]

FENCED_JSON = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.I)

REQUIRED_FIELDS = ("score", "feedback", "suggestions")


def detect_policy_violation(text: str) -> bool:
    return any(pattern.search(text or "") for pattern in POLICY_PATTERNS)


def _balanced_objects(text: str) -> Iterator[str]:
    """Yield top-level {...} spans, honoring JSON string quoting."""
    depth = 0
    start = None
    in_string = False
    escaped = False
    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"' and depth > 0:
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}" and depth > 0:
            depth -= 1
            if depth == 0 and start is not None:
                yield text[start : i + 1]
                start = None


def extract_json_object(text: str) -> dict:
    """
    Find a JSON object carrying score, feedback and a suggestions array.

    Tries fenced code blocks, then brace-balanced spans, then the widest
    {...} span.

    Raises:
        MalformedResponseError: if no candidate parses with the required fields
    """
    candidates = [m.group(1).strip() for m in FENCED_JSON.finditer(text)]
    candidates.extend(_balanced_objects(text))
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        candidates.append(text[start : end + 1])

    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except json.JSONDecodeError:
            continue
        if (
            isinstance(data, dict)
            and all(key in data for key in REQUIRED_FIELDS)
            and isinstance(data["suggestions"], list)
        ):
            return data
    raise MalformedResponseError("No JSON object with score, feedback and suggestions")


def coerce_score(value: Any) -> Optional[int]:
    """Integer score from a JSON value; None if it is not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        match = re.fullmatch(r"\s*(\d+)(?:\s*/\s*10)?\s*", value)
        if match:
            return int(match.group(1))
    return None


# Field regexes for JSON that is cut off or otherwise broken
_JSON_FEEDBACK = re.compile(r'"feedback"\s*:\s*"((?:[^"\\]|\\.)*)"', re.S)
_JSON_SUGGESTIONS = re.compile(r'"suggestions"\s*:\s*\[([^\]]*)\]', re.S)
_JSON_STRING = re.compile(r'"((?:[^"\\]|\\.)*)"')


def _unescape(value: str) -> str:
    try:
        return json.loads(f'"{value}"')
    except json.JSONDecodeError:
        return value


@dataclass
class RecoveryOutcome:
    """Recovered response plus how it was obtained."""

    response: AnalyzeOutfitResponse
    stage: str  # "strict_json" | "relaxed" | "fallback"
    policy_violation: bool = False
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


@dataclass
class _Draft:
    score: Optional[int]
    feedback: str
    suggestions: list[str]
    style_analysis: Any = None


class ResponseRecoveryParser:
    """
    Recovers a structured outfit analysis from unreliable model text.

    Usage:
        parser = ResponseRecoveryParser()
        outcome = parser.parse(model_text, feedback_mode="normal")
        outcome.response.score
    """

    def __init__(
        self,
        config: Optional[RecoveryConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or RecoveryConfig()
        self.rng = rng or random.Random()
        self.fallback = FallbackGenerator(self.rng)

    def parse(
        self,
        text: Optional[str],
        feedback_mode: str = "normal",
        event_context: Optional[str] = None,
    ) -> RecoveryOutcome:
        """
        Recover a response from model text.

        Args:
            text: Raw model output (may be empty or garbage)
            feedback_mode: "normal" or "roast"
            event_context: Occasion, used in synthetic wording

        Returns:
            RecoveryOutcome whose response is always schema-valid
        """
        try:
            return self._parse(text or "", feedback_mode, event_context)
        except Exception as e:
            console.print(f"[red]Response recovery failed, using fallback: {escape(str(e))}[/red]")
            return RecoveryOutcome(
                response=self.fallback.response(feedback_mode, event_context),
                stage="fallback",
                errors=[str(e)],
            )

    # =========================================================================
    # STATES
    # =========================================================================

    def _parse(self, text: str, mode: str, event_context: Optional[str]) -> RecoveryOutcome:
        if not text.strip():
            console.print("[yellow]Empty analysis response, using fallback[/yellow]")
            return RecoveryOutcome(
                response=self.fallback.response(mode, event_context),
                stage="fallback",
                errors=["Empty response"],
            )

        if detect_policy_violation(text):
            console.print("[yellow]Content policy refusal detected, using fallback[/yellow]")
            return RecoveryOutcome(
                response=self.fallback.response(mode, event_context),
                stage="fallback",
                policy_violation=True,
                errors=["Content policy refusal"],
            )

        try:
            draft = self._from_json(extract_json_object(text), mode)
            stage = "strict_json"
        except MalformedResponseError:
            draft = self._relaxed(text, mode)
            stage = "relaxed"

        report = validate_analysis(
            draft.score,
            draft.feedback,
            draft.suggestions,
            draft.style_analysis,
            feedback_mode=mode,
            config=self.config,
        )
        if report.is_valid:
            return RecoveryOutcome(
                response=self._finalize(draft, mode),
                stage=stage,
                warnings=report.warnings,
            )

        console.print(
            f"[yellow]Analysis failed validation ({'; '.join(report.errors)}), filling from fallback[/yellow]"
        )
        if not report.score_ok:
            draft.score = self.fallback.score(mode)
        if not report.feedback_ok:
            draft.feedback = self.fallback.feedback(mode, event_context)
        if not report.suggestions_ok:
            valid = [s for s in draft.suggestions if len(s.strip()) >= self.config.min_suggestion_length]
            draft.suggestions = valid or self.fallback.suggestions(mode, event_context)
        if not report.style_analysis_ok:
            draft.style_analysis = self.fallback.style_analysis()

        return RecoveryOutcome(
            response=self._finalize(draft, mode),
            stage="fallback",
            errors=report.errors,
            warnings=report.warnings,
        )

    def _from_json(self, data: dict, mode: str) -> _Draft:
        suggestions = [str(s) for s in data.get("suggestions") or [] if isinstance(s, str)]
        feedback = data.get("feedback")
        feedback = feedback if isinstance(feedback, str) else ""
        if mode != "roast":
            feedback = clean_feedback(feedback)
            suggestions = format_suggestions(suggestions)
        else:
            feedback = feedback.strip()
            suggestions = [s.strip() for s in suggestions if s.strip()]
        return _Draft(
            score=self._cap(coerce_score(data.get("score")), mode),
            feedback=feedback,
            suggestions=suggestions,
            style_analysis=data.get("styleAnalysis", data.get("style_analysis")),
        )

    def _relaxed(self, text: str, mode: str) -> _Draft:
        score = extract_score(text)
        if score is None:
            score = (
                self.config.roast_default_score
                if mode == "roast"
                else self.config.normal_default_score
            )

        feedback_match = _JSON_FEEDBACK.search(text)
        suggestions_match = _JSON_SUGGESTIONS.search(text)
        if feedback_match:
            feedback = _unescape(feedback_match.group(1))
        else:
            feedback = strip_suggestion_section(strip_score_mentions(text))
        if suggestions_match:
            suggestions = [_unescape(s) for s in _JSON_STRING.findall(suggestions_match.group(1))]
        else:
            suggestions = extract_suggestions(text, self.config.min_suggestion_length)

        if mode == "roast":
            feedback = feedback.strip()
            if feedback and is_too_nice(feedback):
                feedback = f"{self.rng.choice(BRUTAL_PREFIXES)}\n\n{feedback}"
            suggestions = [s.strip() for s in suggestions if s.strip()]
        else:
            feedback = clean_feedback(feedback)
            suggestions = format_suggestions(suggestions)

        suggestions = [s for s in suggestions if len(s) >= self.config.min_suggestion_length]
        return _Draft(score=self._cap(score, mode), feedback=feedback, suggestions=suggestions)

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _cap(self, score: Optional[int], mode: str) -> Optional[int]:
        if score is not None and mode == "roast" and 1 <= score <= 10:
            return min(score, self.config.roast_score_cap)
        return score

    def _finalize(self, draft: _Draft, mode: str) -> AnalyzeOutfitResponse:
        """Last guard on ranges before building the response model."""
        score = draft.score if draft.score is not None else self.fallback.score(mode)
        score = max(1, min(10, int(score)))
        if mode == "roast":
            score = min(score, self.config.roast_score_cap)

        suggestions = [s for s in draft.suggestions if s and s.strip()]
        if not suggestions:
            suggestions = self.fallback.suggestions(mode)
        feedback = draft.feedback.strip() or self.fallback.feedback(mode)

        return AnalyzeOutfitResponse(
            score=score,
            feedback=feedback,
            suggestions=suggestions[: self.config.max_suggestions],
            style_analysis=parse_style_analysis(draft.style_analysis),
        )


def recover_analysis(
    text: Optional[str],
    feedback_mode: str = "normal",
    event_context: Optional[str] = None,
    rng: Optional[random.Random] = None,
) -> AnalyzeOutfitResponse:
    """Convenience wrapper returning only the recovered response."""
    return ResponseRecoveryParser(rng=rng).parse(text, feedback_mode, event_context).response
