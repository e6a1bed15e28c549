"""
Outfit Analyzer

Sends an outfit photo to the vision model and turns the reply into an
AnalyzeOutfitResponse through the Response Recovery Parser. Every path,
including a missing API key or a transport error, ends in a valid response.

Usage:
    from ratemyfit.ai import OutfitAnalyzer
    from ratemyfit.models import AnalyzeOutfitRequest

    async with OutfitAnalyzer() as analyzer:
        outcome = await analyzer.analyze(
            AnalyzeOutfitRequest(image_base64=b64, feedback_mode="roast")
        )
        print(outcome.response.score)
"""

import random
from dataclasses import dataclass
from typing import Optional

from rich.console import Console
from rich.markup import escape

from config.settings import RecoveryConfig
from ratemyfit.models import AnalyzeOutfitRequest

from .openai_client import OpenAIClient
from .prompts import build_analysis_prompts
from .response_recovery import RecoveryOutcome, ResponseRecoveryParser

console = Console()


@dataclass
class AnalyzerConfig:
    """Generation settings per feedback mode."""

    model: Optional[str] = None  # Defaults to the client's vision_model
    normal_temperature: float = 0.7
    normal_max_tokens: int = 1200
    roast_temperature: float = 0.9
    roast_max_tokens: int = 800


class OutfitAnalyzer:
    """Vision-model outfit rating with guaranteed structured output."""

    def __init__(
        self,
        config: Optional[AnalyzerConfig] = None,
        ai_client: Optional[OpenAIClient] = None,
        recovery_config: Optional[RecoveryConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        self.config = config or AnalyzerConfig()
        self.client = ai_client
        self._owns_client = ai_client is None
        self.parser = ResponseRecoveryParser(recovery_config, rng)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self._owns_client and self.client:
            await self.client.close()

    async def analyze(self, request: AnalyzeOutfitRequest) -> RecoveryOutcome:
        """
        Rate an outfit photo.

        Args:
            request: Image plus gender, feedback mode and optional event context

        Returns:
            RecoveryOutcome; ``stage`` tells whether the model's answer was
            used as-is, recovered, or replaced by fallback content.
        """
        roast = request.feedback_mode == "roast"
        system, user = build_analysis_prompts(request)
        console.print(
            f"[cyan]Analyzing outfit ({request.feedback_mode} mode"
            f"{', ' + escape(request.event_context) if request.event_context else ''})...[/cyan]"
        )

        text = ""
        if self.client is None:
            try:
                self.client = OpenAIClient()
            except ValueError as e:
                console.print(f"[yellow]Outfit analysis unavailable: {escape(str(e))}[/yellow]")

        if self.client is not None:
            text = await self.client.generate_with_image(
                user,
                request.image_base64,
                model=self.config.model,
                system=system,
                temperature=self.config.roast_temperature if roast else self.config.normal_temperature,
                max_tokens=self.config.roast_max_tokens if roast else self.config.normal_max_tokens,
            )

        outcome = self.parser.parse(text, request.feedback_mode, request.event_context)
        color = "green" if outcome.stage != "fallback" else "yellow"
        console.print(
            f"[{color}]Analysis ready: score {outcome.response.score}/10 ({outcome.stage})[/{color}]"
        )
        return outcome
