"""
Synthetic outfit analysis used when model output cannot be trusted.

Content is randomized but bounded: the seasonal type comes from the fixed
list, scale values stay in 0-100, the palette is always 8 rows of 6 hex
colors generated from HSL, and the score stays in range for the mode. Pass a
seeded ``random.Random`` for reproducible output.
"""

import colorsys
import random
from typing import Optional

from ratemyfit.models import (
    AnalyzeOutfitResponse,
    BodyType,
    ColorAnalysis,
    ColorPalette,
    ColorScale,
    StyleAnalysis,
)

from .prompts import SEASONAL_TYPES, STYLE_ARCHETYPES

PALETTE_ROWS = 8
PALETTE_COLUMNS = 6

# Hue centers (degrees) for warm and cool palettes
WARM_HUES = (15, 35, 50, 90, 160, 350)
COOL_HUES = (200, 230, 260, 290, 330, 170)

ARCHETYPE_SHAPES = {
    "Classic": "balanced",
    "Dramatic": "structured",
    "Natural": "relaxed",
    "Romantic": "flowing",
    "Modern": "streamlined",
    "Bohemian": "layered",
}

ARCHETYPE_TIPS = {
    "Classic": [
        "Invest in well-tailored basics in neutral tones",
        "Keep proportions balanced between top and bottom",
        "Finish looks with one refined accessory",
    ],
    "Dramatic": [
        "Lean into sharp shoulders and strong lines",
        "Use high-contrast color pairings deliberately",
        "Choose one bold statement piece per outfit",
    ],
    "Natural": [
        "Favor relaxed tailoring and breathable fabrics",
        "Mix organic textures like linen, cotton and suede",
        "Keep accessories simple and functional",
    ],
    "Romantic": [
        "Choose fabrics with soft drape and movement",
        "Add delicate details such as lace or ruching",
        "Define the waist to balance flowing pieces",
    ],
    "Modern": [
        "Stick to clean lines and minimal ornamentation",
        "Build outfits around a tight neutral palette",
        "Use one unexpected texture to add depth",
    ],
    "Bohemian": [
        "Layer lightweight pieces of different lengths",
        "Mix prints within a shared color family",
        "Add handmade or vintage accessories",
    ],
}

BRUTAL_PREFIXES = (
    "Oh honey, NO. This outfit is a complete disaster.",
    "I'm genuinely concerned for your eyesight because this is TRAGIC.",
    "This looks like you got dressed in a tornado during a blackout.",
    "Did you lose a bet or is this your actual fashion sense?",
    "This outfit screams 'I've given up on life and style.'",
)

BRUTAL_SUGGESTIONS = (
    "Burn this outfit and start completely over, there's no saving this disaster.",
    "Hire a stylist immediately, or at least ask a fashionable friend for help.",
    "Study some fashion magazines before leaving the house again.",
)


def hsl_to_hex(hue: float, saturation: float, lightness: float) -> str:
    """Convert HSL (degrees, 0-100, 0-100) to '#rrggbb'."""
    r, g, b = colorsys.hls_to_rgb(
        (hue % 360) / 360.0,
        max(0.0, min(100.0, lightness)) / 100.0,
        max(0.0, min(100.0, saturation)) / 100.0,
    )
    return "#{:02x}{:02x}{:02x}".format(round(r * 255), round(g * 255), round(b * 255))


def _context_text(event_context: Optional[str]) -> str:
    return f" for {event_context}" if event_context else ""


class FallbackGenerator:
    """Builds schema-valid placeholder analyses."""

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    # =========================================================================
    # SCORE, FEEDBACK, SUGGESTIONS
    # =========================================================================

    def score(self, feedback_mode: str = "normal") -> int:
        if feedback_mode == "roast":
            return self.rng.randint(2, 4)
        return self.rng.randint(6, 8)

    def feedback(
        self, feedback_mode: str = "normal", event_context: Optional[str] = None
    ) -> str:
        ctx = _context_text(event_context)
        if feedback_mode == "roast":
            prefix = self.rng.choice(BRUTAL_PREFIXES)
            return (
                f"**Style:** {prefix} Whatever the plan was{ctx}, it did not survive contact with the mirror.\n\n"
                "**Color Coordination:** These colors are not speaking to each other, and frankly they shouldn't.\n\n"
                "**Fit:** The fit is doing you zero favors. Every piece is working against you here.\n\n"
                f"**Overall Impression:** This needs a complete overhaul{ctx}."
            )
        return (
            f"**Style:** This outfit shows good fashion sense{ctx}. The overall composition works well together.\n\n"
            "**Color Coordination:** The color choices complement each other nicely and create a cohesive look.\n\n"
            "**Fit:** The garments appear to fit well and flatter your silhouette.\n\n"
            f"**Overall Impression:** This is a solid outfit choice{ctx} that demonstrates good style awareness."
        )

    def suggestions(
        self, feedback_mode: str = "normal", event_context: Optional[str] = None
    ) -> list[str]:
        if feedback_mode == "roast":
            return list(BRUTAL_SUGGESTIONS)
        ctx = _context_text(event_context)
        return [
            f"Consider adding a statement accessory to elevate the look{ctx}.",
            "Try experimenting with different textures to add visual interest.",
            "A small adjustment to the proportions could enhance the overall silhouette.",
        ]

    # =========================================================================
    # STYLE ANALYSIS
    # =========================================================================

    def color_analysis(self, seasonal_type: Optional[str] = None) -> ColorAnalysis:
        seasonal_type = seasonal_type or self.rng.choice(SEASONAL_TYPES)
        warm = "Spring" in seasonal_type or "Autumn" in seasonal_type

        undertone = self.rng.randint(60, 90) if warm else self.rng.randint(10, 40)
        if seasonal_type.startswith("Light"):
            lightness = self.rng.randint(70, 90)
        elif seasonal_type.startswith("Deep"):
            lightness = self.rng.randint(15, 35)
        else:
            lightness = self.rng.randint(40, 60)
        if "Summer" in seasonal_type or "Autumn" in seasonal_type:
            intensity = self.rng.randint(20, 45)
        else:
            intensity = self.rng.randint(55, 85)

        return ColorAnalysis(
            seasonal_type=seasonal_type,
            undertone=ColorScale(
                value=undertone,
                description="Warm, golden tones" if warm else "Cool, blue-based tones",
            ),
            intensity=ColorScale(
                value=intensity,
                description="Clear, vibrant colors" if intensity >= 50 else "Soft, muted colors",
            ),
            lightness=ColorScale(
                value=lightness,
                description="Light palette" if lightness >= 60 else (
                    "Deep palette" if lightness <= 35 else "Medium depth palette"
                ),
            ),
            explanation=(
                f"The outfit's colors point toward a {seasonal_type} palette. "
                "Colors that share this undertone and depth will look the most harmonious."
            ),
        )

    def color_palette(self, analysis: Optional[ColorAnalysis] = None) -> ColorPalette:
        """8 rows x 6 columns, each column one hue running light to dark."""
        analysis = analysis or self.color_analysis()
        hues = WARM_HUES if analysis.undertone.value >= 50 else COOL_HUES
        saturation = 25 + analysis.intensity.value * 0.6
        offsets = [self.rng.uniform(-8, 8) for _ in range(PALETTE_COLUMNS)]

        rows = []
        for row in range(PALETTE_ROWS):
            lightness = 88 - row * (70 / (PALETTE_ROWS - 1))
            rows.append(
                [
                    hsl_to_hex(hues[col] + offsets[col], saturation, lightness)
                    for col in range(PALETTE_COLUMNS)
                ]
            )
        return ColorPalette(
            colors=rows,
            explanation=(
                f"These shades complement a {analysis.seasonal_type} palette. "
                "Lighter rows work as base colors and deeper rows as accents."
            ),
        )

    def body_type(self) -> BodyType:
        archetype = self.rng.choice(list(STYLE_ARCHETYPES))
        return BodyType(
            type=archetype,
            description=STYLE_ARCHETYPES[archetype],
            visual_shape=ARCHETYPE_SHAPES[archetype],
            styling_recommendations=list(ARCHETYPE_TIPS[archetype]),
        )

    def style_analysis(self) -> StyleAnalysis:
        analysis = self.color_analysis()
        return StyleAnalysis(
            color_analysis=analysis,
            color_palette=self.color_palette(analysis),
            body_type=self.body_type(),
        )

    # =========================================================================
    # FULL RESPONSE
    # =========================================================================

    def response(
        self, feedback_mode: str = "normal", event_context: Optional[str] = None
    ) -> AnalyzeOutfitResponse:
        """A complete synthetic response; roast mode carries no style analysis."""
        return AnalyzeOutfitResponse(
            score=self.score(feedback_mode),
            feedback=self.feedback(feedback_mode, event_context),
            suggestions=self.suggestions(feedback_mode, event_context),
            style_analysis=None if feedback_mode == "roast" else self.style_analysis(),
        )
