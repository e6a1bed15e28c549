"""
Data model for extracted clothing tags, reference data and outfit analysis.

Extracted items are a tagged union keyed on ``source``: every variant carries
the same required fields (name, descriptors, category, confidence) plus a few
source-specific extras. JSON read back from storage or returned by the AI
service is converted with ``parse_extracted_items`` so malformed rows are
dropped at the boundary instead of flowing through the pipeline.
"""

import re
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel

from ratemyfit.vocabulary import coerce_category, normalize_phrase


class ItemSource(str, Enum):
    REGEX = "regex"
    WHITELIST = "whitelist"
    CATALOG = "catalog"
    AI = "ai"
    HYBRID = "hybrid"


# =============================================================================
# EXTRACTED ITEMS
# =============================================================================


class _ItemBase(BaseModel):
    """Fields every extracted item carries regardless of source."""

    name: str = Field(min_length=1)
    descriptors: list[str] = Field(default_factory=list)
    category: str = Field(default="", validate_default=True)  # Empty: derived from name
    confidence: float = Field(ge=0.0, le=1.0)

    @field_validator("name")
    @classmethod
    def clean_name(cls, v: str) -> str:
        v = re.sub(r"\s+", " ", v).strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("descriptors", mode="before")
    @classmethod
    def clean_descriptors(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [str(d).strip().lower() for d in v if str(d).strip()]

    @field_validator("category", mode="before")
    @classmethod
    def clean_category(cls, v, info):
        return coerce_category(v, info.data.get("name", ""))

    @property
    def key(self) -> str:
        """Deduplication key: lowercase, whitespace-normalized name."""
        return normalize_phrase(self.name)


class RegexItem(_ItemBase):
    source: Literal["regex"] = "regex"


class WhitelistItem(_ItemBase):
    source: Literal["whitelist"] = "whitelist"
    matched_entry: Optional[str] = None


class CatalogMatchItem(_ItemBase):
    source: Literal["catalog"] = "catalog"
    product_name: Optional[str] = None
    brand: Optional[str] = None
    rating: Optional[float] = None


class AIItem(_ItemBase):
    source: Literal["ai"] = "ai"


class HybridItem(_ItemBase):
    source: Literal["hybrid"] = "hybrid"
    sources: list[ItemSource] = Field(default_factory=list)


ExtractedItem = Annotated[
    Union[RegexItem, WhitelistItem, CatalogMatchItem, AIItem, HybridItem],
    Field(discriminator="source"),
]

_ITEM_LIST_ADAPTER = TypeAdapter(list[ExtractedItem])
_ITEM_ADAPTER = TypeAdapter(ExtractedItem)


def parse_extracted_items(raw: Optional[list]) -> list:
    """
    Validate a JSON array of extracted items.

    Rows without a ``source`` are treated as AI output (the shape older
    records were written in). Rows that fail validation are dropped.
    """
    if not raw:
        return []
    items = []
    for row in raw:
        if not isinstance(row, dict):
            continue
        data = dict(row)
        data.setdefault("source", ItemSource.AI.value)
        data.setdefault("confidence", 0.5)
        try:
            items.append(_ITEM_ADAPTER.validate_python(data))
        except ValidationError:
            continue
    return items


def dump_extracted_items(items: list) -> list[dict]:
    """Serialize items to JSON-ready dicts for storage."""
    return _ITEM_LIST_ADAPTER.dump_python(items, mode="json")


# =============================================================================
# REFERENCE DATA
# =============================================================================


def _split_array_field(v) -> list[str]:
    """Accept a list or a comma-separated string."""
    if v is None:
        return []
    if isinstance(v, str):
        v = v.split(",")
    return [str(x).strip().lower() for x in v if str(x).strip()]


class WhitelistEntry(BaseModel):
    """A curated garment name and its category."""

    item_name: str
    category: str = Field(default="", validate_default=True)
    style_descriptors: list[str] = Field(default_factory=list)
    common_materials: list[str] = Field(default_factory=list)

    @field_validator("item_name")
    @classmethod
    def clean_item_name(cls, v: str) -> str:
        v = normalize_phrase(v)
        if not v:
            raise ValueError("item_name must not be blank")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def clean_category(cls, v, info):
        return coerce_category(v, info.data.get("item_name", ""))

    @field_validator("style_descriptors", "common_materials", mode="before")
    @classmethod
    def clean_list(cls, v):
        return _split_array_field(v)


class CatalogItem(BaseModel):
    """A product row from the external catalog."""

    product_name: str
    category: Optional[str] = None
    sub_category: Optional[str] = None
    color: Optional[str] = None
    material: Optional[str] = None
    brand: Optional[str] = None
    rating: Optional[float] = None
    gender: Optional[str] = None
    normalized_name: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        return _split_array_field(v)

    @field_validator("rating", mode="before")
    @classmethod
    def clean_rating(cls, v):
        if v in (None, ""):
            return None
        try:
            return float(v)
        except (TypeError, ValueError):
            return None


# =============================================================================
# RUN RESULTS
# =============================================================================


class ExtractionResponse(BaseModel):
    """Output of the AI extraction adapter."""

    success: bool
    items: Optional[list[ExtractedItem]] = None
    error: Optional[str] = None


class ExtractionResult(BaseModel):
    """Summary of one pipeline run."""

    items: list[ExtractedItem] = Field(default_factory=list)
    strategy: str = "hybrid"
    candidates: list[str] = Field(default_factory=list)
    source_counts: dict[str, int] = Field(default_factory=dict)
    dropped_count: int = 0
    failed_sources: list[str] = Field(default_factory=list)
    ai_success: bool = False
    persisted: bool = False


class WardrobeEntry(BaseModel):
    """The parts of a wardrobe row the pipeline reads."""

    id: str
    feedback: Optional[str] = None
    suggestions: list[str] = Field(default_factory=list)
    gender: Optional[str] = None
    feedback_mode: Optional[str] = None
    occasion_context: Optional[str] = None
    rating_score: Optional[int] = None
    extracted_clothing_items: list[ExtractedItem] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v):
        return str(v)

    @field_validator("suggestions", mode="before")
    @classmethod
    def clean_suggestions(cls, v):
        if not v:
            return []
        return [str(s) for s in v if s]

    @field_validator("extracted_clothing_items", mode="before")
    @classmethod
    def parse_items(cls, v):
        return parse_extracted_items(v)


# =============================================================================
# OUTFIT ANALYSIS
# =============================================================================


class _CamelModel(BaseModel):
    """Serializes with camelCase keys and accepts either spelling."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AnalyzeOutfitRequest(_CamelModel):
    image_base64: str
    gender: Literal["male", "female"] = "female"
    feedback_mode: Literal["normal", "roast"] = "normal"
    event_context: Optional[str] = None
    is_neutral: bool = False


class ColorScale(_CamelModel):
    value: int = Field(ge=0, le=100)
    description: str


class ColorAnalysis(_CamelModel):
    seasonal_type: str
    undertone: ColorScale
    intensity: ColorScale
    lightness: ColorScale
    explanation: str


_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")


class ColorPalette(_CamelModel):
    colors: list[list[str]]
    explanation: str

    @field_validator("colors")
    @classmethod
    def check_grid(cls, v: list[list[str]]) -> list[list[str]]:
        if len(v) != 8 or any(len(row) != 6 for row in v):
            raise ValueError("palette must be 8 rows of 6 colors")
        for row in v:
            for color in row:
                if not _HEX_COLOR.match(color):
                    raise ValueError(f"invalid hex color: {color}")
        return v


class BodyType(_CamelModel):
    type: str
    description: str
    visual_shape: str
    styling_recommendations: list[str] = Field(default_factory=list)


class StyleAnalysis(_CamelModel):
    color_analysis: ColorAnalysis
    color_palette: ColorPalette
    body_type: BodyType


class AnalyzeOutfitResponse(_CamelModel):
    score: int = Field(ge=1, le=10)
    feedback: str
    suggestions: list[str] = Field(min_length=1)
    style_analysis: Optional[StyleAnalysis] = None
