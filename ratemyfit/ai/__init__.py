"""
AI Module

Chat and vision model integrations:
- OpenAIClient: async wrapper around the OpenAI chat API
- ClothingExtractor: AI extraction adapter for clothing tags
- OutfitAnalyzer: vision-model outfit rating
- ResponseRecoveryParser: turns unreliable model text into a valid analysis
"""

from .clothing_extractor import (
    ClothingExtractor,
    ClothingExtractorConfig,
    build_extraction_prompt,
    parse_phrase_array,
    validate_ai_phrase,
)
from .fallback import FallbackGenerator
from .openai_client import OpenAIClient, OpenAIConfig
from .outfit_analyzer import AnalyzerConfig, OutfitAnalyzer
from .prompts import build_analysis_prompts
from .response_recovery import (
    RecoveryOutcome,
    ResponseRecoveryParser,
    detect_policy_violation,
    extract_json_object,
    recover_analysis,
)
from .response_validator import ValidationReport, validate_analysis

__all__ = [
    "OpenAIClient",
    "OpenAIConfig",
    "ClothingExtractor",
    "ClothingExtractorConfig",
    "build_extraction_prompt",
    "parse_phrase_array",
    "validate_ai_phrase",
    "FallbackGenerator",
    "AnalyzerConfig",
    "OutfitAnalyzer",
    "build_analysis_prompts",
    "RecoveryOutcome",
    "ResponseRecoveryParser",
    "detect_policy_violation",
    "extract_json_object",
    "recover_analysis",
    "ValidationReport",
    "validate_analysis",
]
