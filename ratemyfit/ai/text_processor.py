"""
Text clean-up for model-written feedback and suggestions.
"""

import re

SCORE_PATTERNS = [
    re.compile(r"(\d+)(?:\s*/\s*10|(?:\s+out\s+of|\s+on\s+a\s+scale\s+of)\s+10)", re.I),
    re.compile(r"(?:score|rating)[\"']?(?:\*\*)?\s*:(?:\*\*)?\s*[\"']?(\d+)", re.I),
    re.compile(r"\b(\d+)\s*/\s*10\b", re.I),
]

SUGGESTION_SECTION = re.compile(
    r"(?:\*\*)?(Suggestions|Improvements|Recommendations|Tips)(?:\*\*)?:(?:\*\*)?"
    r"([\s\S]+?)(?=\n\s*\n(?!\s*(?:\d+[.)]|[-*•]))|\Z)",
    re.I,
)

LIST_MARKER = re.compile(r"^(?:\d+[.)]|[-*•])\s*")

SUGGESTION_KEYWORDS = re.compile(
    r"\b(?:suggest|try|consider|add|improve|change|update|opt for|choose|pair with)\b",
    re.I,
)

_SECTION_END = r"(?=(?:\*\*)?(?:Style|Color Coordination|Color|Fit|Overall Impression|Overall)(?:\*\*)?:|\Z)"

SECTION_PATTERNS = {
    "style": re.compile(r"(?:\*\*)?Style(?:\*\*)?:(?:\*\*)?\s*(.*?)" + _SECTION_END, re.I | re.S),
    "color": re.compile(
        r"(?:\*\*)?(?:Color Coordination|Color)(?:\*\*)?:(?:\*\*)?\s*(.*?)" + _SECTION_END,
        re.I | re.S,
    ),
    "fit": re.compile(r"(?:\*\*)?Fit(?:\*\*)?:(?:\*\*)?\s*(.*?)" + _SECTION_END, re.I | re.S),
    "overall": re.compile(
        r"(?:\*\*)?(?:Overall Impression|Overall)(?:\*\*)?:(?:\*\*)?\s*(.*?)" + _SECTION_END,
        re.I | re.S,
    ),
}

SECTION_TITLES = {
    "style": "Style",
    "color": "Color Coordination",
    "fit": "Fit",
    "overall": "Overall Impression",
}


def clean_and_enhance_text(text: str) -> str:
    """Repair markdown, spacing, capitalization and terminal punctuation."""
    if not text:
        return ""

    cleaned = text
    # Malformed markdown
    cleaned = cleaned.replace("**:**", ":")
    cleaned = re.sub(r"\*\*\s*\*\*", "", cleaned)
    cleaned = re.sub(r"\*\*([^*\n]*)\*\*:", r"**\1:**", cleaned)

    # Spacing (keep paragraph breaks)
    cleaned = re.sub(r"[ \t]{2,}", " ", cleaned)
    cleaned = re.sub(r"\s+\.", ".", cleaned)
    cleaned = re.sub(r"\.[ \t]*([a-z])", lambda m: f". {m.group(1).upper()}", cleaned)

    # Repeated words
    cleaned = re.sub(r"\b(\w+)\s+\1\b", r"\1", cleaned, flags=re.I)

    cleaned = cleaned.strip()
    if cleaned and cleaned[-1].isalpha():
        cleaned += "."
    return cleaned


def format_suggestions(suggestions: list[str]) -> list[str]:
    """Strip list markers and headers, capitalize, punctuate; drop fragments."""
    formatted = []
    for suggestion in suggestions:
        text = clean_and_enhance_text(str(suggestion))
        text = re.sub(r"^(?:\d+[.)]|[-*•])\s*", "", text)
        text = re.sub(r"^(?:Improvement|Suggestions?|Style):?\s*", "", text, flags=re.I)
        text = text.strip()
        if not text:
            continue
        text = text[0].upper() + text[1:]
        if text[-1] not in ".!?":
            text += "."
        if len(text) > 5:
            formatted.append(text)
    return formatted


def extract_score(text: str):
    """First 1-10 score mentioned in text, or None."""
    for pattern in SCORE_PATTERNS:
        match = pattern.search(text or "")
        if match:
            value = int(match.group(1))
            if 1 <= value <= 10:
                return value
    return None


def split_list_items(block: str) -> list[str]:
    """Split a numbered or bulleted block into its items; unmarked lines are items too."""
    lines = [line.strip() for line in (block or "").strip().splitlines() if line.strip()]
    has_markers = any(LIST_MARKER.match(line) for line in lines)
    items: list[str] = []
    for line in lines:
        marker = LIST_MARKER.match(line)
        if marker:
            items.append(line[marker.end():].strip())
        elif has_markers and items:
            # Continuation of the previous item
            items[-1] = f"{items[-1]} {line}"
        else:
            items.append(line)
    return [item for item in items if item]


def extract_suggestions(text: str, min_length: int = 10) -> list[str]:
    """
    Pull suggestions out of free text.

    Looks for a Suggestions/Improvements/Recommendations/Tips section first,
    then falls back to sentences containing advice keywords.
    """
    if not text:
        return []
    section = SUGGESTION_SECTION.search(text)
    if section:
        items = [s for s in split_list_items(section.group(2)) if len(s) >= min_length]
        if items:
            return items

    sentences = re.split(r"(?<=[.!?])\s+", text)
    return [
        s.strip()
        for s in sentences
        if SUGGESTION_KEYWORDS.search(s) and len(s.strip()) >= min_length
    ]


def strip_score_mentions(text: str) -> str:
    text = re.sub(
        r"\b(?:Score|Rating)(?:\*\*)?:?(?:\*\*)?\s*\d+(?:\s*/\s*10)?\b|\b\d+\s*/\s*10\b|\b\d+ out of 10\b",
        "",
        text or "",
        flags=re.I,
    )
    return re.sub(r"[ \t]{2,}", " ", text).strip()


def strip_suggestion_section(text: str) -> str:
    return SUGGESTION_SECTION.sub("", text or "").strip()


def extract_structured_feedback(text: str) -> dict[str, str]:
    """Split feedback into style / color / fit / overall sections when present."""
    sections = {}
    for key, pattern in SECTION_PATTERNS.items():
        match = pattern.search(text or "")
        if match and match.group(1).strip():
            sections[key] = clean_and_enhance_text(match.group(1).strip().strip("*").strip())
    return sections


def rebuild_feedback(sections: dict[str, str]) -> str:
    return "\n\n".join(
        f"**{SECTION_TITLES[key]}:** {sections[key]}"
        for key in ("style", "color", "fit", "overall")
        if sections.get(key)
    )


def clean_feedback(text: str) -> str:
    """Normalize feedback, rebuilding the four-section layout when found."""
    sections = extract_structured_feedback(text)
    if len(sections) >= 2:
        return rebuild_feedback(sections)
    return clean_and_enhance_text(text)
