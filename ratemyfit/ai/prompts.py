"""
Prompt builders for outfit analysis.

The system message depends on gender, feedback mode (normal or roast) and an
optional event context. Normal mode also asks for the style-analysis JSON
block (seasonal color type, 8x6 palette, styling archetype).
"""

from typing import Optional

from ratemyfit.models import AnalyzeOutfitRequest

# =============================================================================
# REFERENCE LISTS
# =============================================================================

SEASONAL_TYPES = (
    "Light Spring",
    "Light Summer",
    "Light Autumn",
    "Light Winter",
    "True Spring",
    "True Summer",
    "True Autumn",
    "True Winter",
    "Deep Spring",
    "Deep Summer",
    "Deep Autumn",
    "Deep Winter",
    "Warm Spring",
    "Warm Autumn",
    "Cool Summer",
    "Cool Winter",
)

STYLE_ARCHETYPES = {
    "Classic": "Timeless pieces, balanced proportions, refined coordination",
    "Dramatic": "Bold silhouettes, sharp lines, high contrast styling",
    "Natural": "Relaxed tailoring, organic textures, effortless coordination",
    "Romantic": "Soft draping, delicate details, flowing garments",
    "Modern": "Clean lines, minimalist approach, contemporary styling",
    "Bohemian": "Relaxed layers, mixed textures, free-spirited coordination",
}

FEEDBACK_SECTIONS = ("Style", "Color Coordination", "Fit", "Overall Impression")


# =============================================================================
# SYSTEM MESSAGES
# =============================================================================


def _audience(gender: str) -> str:
    return "men's fashion" if gender == "male" else "women's fashion"


def _section_format(roast: bool, event_context: Optional[str]) -> str:
    about = f' for "{event_context}"' if event_context else ""
    if roast:
        lines = {
            "Style": f"Your brutally honest, funny roast of the overall style{about}",
            "Color Coordination": f"Your sarcastic take on the color choices{about}",
            "Fit": f"Your roast-style commentary on how the clothes fit{about}",
            "Overall Impression": f"Your final brutal but funny verdict{about}",
        }
    else:
        lines = {
            "Style": f"Analysis of the overall style{about}",
            "Color Coordination": f"How the colors work together{about}",
            "Fit": f"How the garments fit and flatter the body{about}",
            "Overall Impression": f"Your overall verdict{about}",
        }
    return "\n\n".join(f"**{name}:** [{lines[name]}]" for name in FEEDBACK_SECTIONS)


def build_system_message(
    gender: str = "female",
    feedback_mode: str = "normal",
    event_context: Optional[str] = None,
    is_neutral: bool = False,
) -> str:
    """
    Build the system message for an outfit analysis.

    A neutral request, or one without event context, gets the default prompt;
    otherwise every section is framed around the occasion.
    """
    roast = feedback_mode == "roast"
    context = None if is_neutral else (event_context or "").strip() or None

    if roast:
        persona = (
            "You are a brutally honest, sarcastic fashion critic specializing in "
            f"{_audience(gender)}."
        )
        closing = (
            "Keep it funny but not mean-spirited. Use cultural references and "
            "roast comedy. Give three improvement suggestions in a sarcastic tone."
        )
    else:
        persona = (
            f"You are an expert fashion consultant specializing in {_audience(gender)}."
        )
        closing = "Give three specific style improvement suggestions."

    parts = [persona]
    if context:
        parts.append(
            f'The user is asking about an outfit for this SPECIFIC CONTEXT: "{context}". '
            f'Evaluate the outfit FOR "{context}" and mention it in every section.'
        )
    parts.append(
        "Analyze this outfit photo and write feedback in this EXACT format:\n\n"
        + _section_format(roast, context)
    )
    score_for = f' for how well the outfit suits "{context}"' if context else ""
    parts.append(f"Also provide a score from 1-10{score_for}. {closing}")
    return "\n\n".join(parts)


def build_style_analysis_prompt() -> str:
    """JSON response instructions, including the styleAnalysis block."""
    seasonal = ", ".join(SEASONAL_TYPES)
    archetypes = "\n".join(f"- {name}: {desc}" for name, desc in STYLE_ARCHETYPES.items())
    return f"""Respond with ONLY a JSON object in this exact structure:

{{
  "score": <integer 1-10>,
  "feedback": "<feedback with **Style:**, **Color Coordination:**, **Fit:**, **Overall Impression:** sections>",
  "suggestions": ["<suggestion 1>", "<suggestion 2>", "<suggestion 3>"],
  "styleAnalysis": {{
    "colorAnalysis": {{
      "seasonalType": "<one of: {seasonal}>",
      "undertone": {{"value": <0-100, 0 = cool, 100 = warm>, "description": "<text>"}},
      "intensity": {{"value": <0-100, 0 = muted, 100 = vibrant>, "description": "<text>"}},
      "lightness": {{"value": <0-100, 0 = dark, 100 = light>, "description": "<text>"}},
      "explanation": "<2-3 sentences of color theory for this outfit>"
    }},
    "colorPalette": {{
      "colors": [<8 rows, each an array of 6 "#rrggbb" hex codes, light to dark>],
      "explanation": "<2-3 sentences on coordinating these colors>"
    }},
    "bodyType": {{
      "type": "<styling archetype>",
      "description": "<styling approach observed>",
      "visualShape": "<structured, flowing, balanced, ...>",
      "stylingRecommendations": ["<tip 1>", "<tip 2>", "<tip 3>"]
    }}
  }}
}}

Base the analysis on visible clothing only. Styling archetypes:
{archetypes}"""


def build_user_message(event_context: Optional[str] = None, is_neutral: bool = False) -> str:
    if event_context and not is_neutral:
        return (
            f'Please analyze this outfit for "{event_context}". '
            "Focus on how appropriate it is for that occasion."
        )
    return "Please analyze this outfit."


def build_analysis_prompts(request: AnalyzeOutfitRequest) -> tuple[str, str]:
    """Return (system, user) messages for a request."""
    system = build_system_message(
        request.gender, request.feedback_mode, request.event_context, request.is_neutral
    )
    if request.feedback_mode != "roast":
        system = f"{system}\n\n{build_style_analysis_prompt()}"
    return system, build_user_message(request.event_context, request.is_neutral)
