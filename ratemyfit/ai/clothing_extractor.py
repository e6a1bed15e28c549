"""
AI Clothing Extractor

Asks a chat model to list the garments mentioned in outfit feedback, using
the curated whitelist as its vocabulary, then validates every returned phrase
strictly before it becomes an AIItem.

Whatever goes wrong (no API key, transport error, unparseable reply) the
extractor answers with ExtractionResponse(success=False, error=...) and never
raises, so the pipeline can carry on with the other sources.

Usage:
    from ratemyfit.ai import ClothingExtractor

    async with ClothingExtractor() as extractor:
        response = await extractor.extract(feedback, suggestions, whitelist)
"""

import json
import re
from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.markup import escape

from ratemyfit.errors import MalformedResponseError
from ratemyfit.models import AIItem, ExtractionResponse, WhitelistEntry
from ratemyfit.vocabulary import (
    categorize_clothing_item,
    find_garment_noun,
    is_clothing_word,
    normalize_phrase,
)

from .openai_client import OpenAIClient

console = Console()

# Words the model must not put in a tag
AI_FORBIDDEN_WORDS = frozenset(
    {
        "of",
        "with",
        "and",
        "the",
        "a",
        "an",
        "in",
        "on",
        "at",
        "to",
        "for",
        "from",
        "by",
        "against",
    }
)


@dataclass
class ClothingExtractorConfig:
    """Configuration for AI clothing extraction."""

    model: Optional[str] = None  # Defaults to the client's chat_model
    temperature: float = 0.1
    max_tokens: int = 400
    max_items: int = 6
    confidence: float = 0.95


def build_extraction_prompt(
    text: str, whitelist: list[WhitelistEntry], max_items: int = 6
) -> str:
    """Build the extraction prompt with the whitelist inlined as JSON."""
    whitelist_for_prompt = [
        {
            "name": entry.item_name,
            "category": entry.category,
            "descriptors": entry.style_descriptors,
            "materials": entry.common_materials,
        }
        for entry in whitelist
    ]
    vocabulary = (
        f"FASHION WHITELIST:\n{json.dumps(whitelist_for_prompt, indent=2)}"
        if whitelist_for_prompt
        else "No whitelist is available; use common garment names only."
    )

    return f"""You are a fashion expert extracting clothing items from outfit feedback. Use ONLY garment names from the whitelist below.

{vocabulary}

STRICT RULES:
1. Extract clothing items actually mentioned in the text
2. Format: "[Color/Descriptor] [Item]" or "[Item]" (MAX 2 WORDS)
3. NO prepositions or conjunctions (of, with, and, the, a, an, in, on, at, to, for, from, by, against)
4. Return at most {max_items} items
5. No styling phrases or combinations ("shirt and pants" is wrong)

Correct: "Black Jacket", "Denim Jeans", "Jacket"
Incorrect: "Black leather jacket" (3 words), "Pairing of jeans" (preposition)

TEXT TO ANALYZE: "{text}"

Return ONLY a JSON array of item phrases."""


def parse_phrase_array(response: str) -> list:
    """
    Pull the JSON array out of a model reply.

    Accepts a bare array or one wrapped in a ```json fence.

    Raises:
        MalformedResponseError: if no JSON array can be decoded
    """
    cleaned = re.sub(r"```(?:json)?", "", response or "").strip()
    array_match = re.search(r"\[[\s\S]*\]", cleaned)
    if not array_match:
        raise MalformedResponseError("No JSON array found in response")
    try:
        data = json.loads(array_match.group())
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"JSON parse error: {e}") from e
    if not isinstance(data, list):
        raise MalformedResponseError("Response JSON is not an array")
    return data


def validate_ai_phrase(
    phrase: str,
    whitelist: list[WhitelistEntry],
    confidence: float = 0.95,
) -> Optional[AIItem]:
    """
    Strictly validate one phrase from the model.

    Rules: at most two words, no forbidden words, and the phrase must contain
    a whitelist item_name (or, with no whitelist, a known garment noun).
    """
    lower = normalize_phrase(phrase)
    words = lower.split()
    if not words or len(words) > 2:
        return None
    if any(w in AI_FORBIDDEN_WORDS for w in words):
        return None

    if whitelist:
        entry = next((e for e in whitelist if e.item_name in lower), None)
        if entry is None:
            return None
        index = lower.find(entry.item_name)
        descriptors = lower[:index].split()
        category = entry.category
    else:
        noun = find_garment_noun(lower)
        if noun is None or not is_clothing_word(words[-1]):
            return None
        descriptors = words[:-1]
        category = categorize_clothing_item(lower)

    return AIItem(
        name=" ".join(w.capitalize() for w in words),
        descriptors=descriptors,
        category=category,
        confidence=confidence,
    )


class ClothingExtractor:
    """
    AI extraction adapter.

    Input is feedback text plus suggestions; output is an ExtractionResponse
    whose items share the ExtractedItem shape of every other source.
    """

    def __init__(
        self,
        config: Optional[ClothingExtractorConfig] = None,
        ai_client: Optional[OpenAIClient] = None,
    ):
        self.config = config or ClothingExtractorConfig()
        self.client = ai_client
        self._owns_client = ai_client is None

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_client and self.client:
            await self.client.close()

    def _ensure_client(self) -> Optional[str]:
        """Create the OpenAI client on first use; return an error message on failure."""
        if self.client is None:
            try:
                self.client = OpenAIClient()
            except ValueError as e:
                return str(e)
        return None

    async def extract(
        self,
        feedback: str,
        suggestions: Optional[list[str]] = None,
        whitelist: Optional[list[WhitelistEntry]] = None,
    ) -> ExtractionResponse:
        """
        Extract clothing items from feedback with the chat model.

        Args:
            feedback: Outfit feedback text
            suggestions: Improvement suggestions that accompany the feedback
            whitelist: Curated garment entries used as the model's vocabulary

        Returns:
            ExtractionResponse; success is False on any failure or when the
            model found nothing valid.
        """
        text = " ".join([feedback or "", *(suggestions or [])]).strip()
        if not text:
            return ExtractionResponse(success=False, error="No text to analyze")

        error = self._ensure_client()
        if error:
            console.print(f"[yellow]AI extraction unavailable: {escape(error)}[/yellow]")
            return ExtractionResponse(success=False, error=error)

        whitelist = whitelist or []
        try:
            response = await self.client.generate(
                build_extraction_prompt(text, whitelist, self.config.max_items),
                model=self.config.model,
                temperature=self.config.temperature,
                max_tokens=self.config.max_tokens,
            )
            if not response:
                return ExtractionResponse(success=False, error="Empty response from model")

            items: list[AIItem] = []
            seen: set[str] = set()
            rejected = 0
            for raw in parse_phrase_array(response):
                phrase = raw.get("name", "") if isinstance(raw, dict) else str(raw)
                item = validate_ai_phrase(phrase, whitelist, self.config.confidence)
                if item is None:
                    rejected += 1
                    continue
                if item.key in seen:
                    continue
                seen.add(item.key)
                items.append(item)

            if rejected:
                console.print(f"[dim]AI extraction: rejected {rejected} phrase(s)[/dim]")
            items = items[: self.config.max_items]
            if not items:
                return ExtractionResponse(success=False, items=[], error="No valid items found")
            return ExtractionResponse(success=True, items=items)

        except MalformedResponseError as e:
            console.print(f"[yellow]AI extraction: {escape(str(e))}[/yellow]")
            return ExtractionResponse(success=False, error=str(e))
        except Exception as e:
            console.print(f"[red]AI extraction failed: {escape(str(e))}[/red]")
            return ExtractionResponse(success=False, error=str(e))
