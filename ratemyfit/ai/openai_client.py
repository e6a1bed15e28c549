"""
OpenAI API Client

Thin async wrapper around the OpenAI chat API used for clothing extraction
(text) and outfit rating (vision). Both calls answer "" on any failure;
callers treat that as "no answer" and fall back.

Usage:
    from ratemyfit.ai import OpenAIClient

    async with OpenAIClient() as client:
        text = await client.generate("List the garments in: ...")
        analysis = await client.generate_with_image(prompt, image_base64, system=system)
"""

import base64
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import httpx
from openai import AsyncOpenAI
from rich.console import Console
from rich.markup import escape

console = Console()

# Leading base64 characters of each image format the upload form accepts
BASE64_SIGNATURES = {
    "/9j/": "image/jpeg",
    "iVBORw0KGgo": "image/png",
    "R0lGOD": "image/gif",
    "UklGR": "image/webp",
}

SUFFIX_MIME_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


@dataclass
class OpenAIConfig:
    """Configuration for OpenAI client."""

    api_key: Optional[str] = None

    # Model selections (override via env: OPENAI_CHAT_MODEL, OPENAI_VISION_MODEL)
    chat_model: str = "gpt-4o-mini"  # Clothing extraction
    vision_model: str = "gpt-4.1"  # Outfit analysis

    timeout_seconds: float = 60.0
    download_timeout_seconds: float = 30.0

    # Used when a call does not pass its own values
    temperature: float = 0.7
    max_tokens: int = 1200


def _token_kwargs(model: str, limit: int) -> dict:
    # gpt-5.x models take max_completion_tokens instead of max_tokens
    if model.startswith("gpt-5"):
        return {"max_completion_tokens": limit}
    return {"max_tokens": limit}


def _image_part(mime: str, b64: str) -> dict:
    return {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{b64}"}}


def sniff_base64_mime(b64: str) -> str:
    """MIME type of a base64 image payload by its signature (JPEG if unknown)."""
    for prefix, mime in BASE64_SIGNATURES.items():
        if b64.startswith(prefix):
            return mime
    return "image/jpeg"


class OpenAIClient:
    """
    Async client for the OpenAI chat API (text and vision).

    The API key comes from OpenAIConfig.api_key or OPENAI_API_KEY; it is
    never read from source.
    """

    def __init__(self, config: Optional[OpenAIConfig] = None):
        """
        Raises:
            ValueError: if no API key is configured
        """
        self.config = config or OpenAIConfig()
        self.config.chat_model = os.getenv("OPENAI_CHAT_MODEL") or self.config.chat_model
        self.config.vision_model = os.getenv("OPENAI_VISION_MODEL") or self.config.vision_model

        api_key = self.config.api_key or os.getenv("OPENAI_API_KEY")
        if not api_key:
            raise ValueError(
                "OpenAI API key not found. Set OPENAI_API_KEY environment variable."
            )
        self._client = AsyncOpenAI(api_key=api_key, timeout=self.config.timeout_seconds)

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def close(self) -> None:
        await self._client.close()

    async def is_available(self) -> bool:
        """Check that the API key is accepted."""
        try:
            await self._client.models.list()
            return True
        except Exception as e:
            console.print(f"[red]OpenAI API not available: {escape(str(e))}[/red]")
            return False

    async def _complete(
        self,
        model: str,
        messages: list[dict],
        temperature: Optional[float],
        max_tokens: Optional[int],
        label: str,
    ) -> str:
        try:
            response = await self._client.chat.completions.create(
                model=model,
                messages=messages,
                temperature=self.config.temperature if temperature is None else temperature,
                **_token_kwargs(model, max_tokens or self.config.max_tokens),
            )
            return response.choices[0].message.content or ""
        except Exception as e:
            console.print(f"[red]OpenAI {label} request failed: {escape(str(e))}[/red]")
            return ""

    async def generate(
        self,
        prompt: str,
        model: Optional[str] = None,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Text completion for clothing extraction.

        Returns:
            Model text, or "" on error
        """
        messages = [{"role": "system", "content": system}] if system else []
        messages.append({"role": "user", "content": prompt})
        return await self._complete(
            model or self.config.chat_model, messages, temperature, max_tokens, "chat"
        )

    async def generate_with_image(
        self,
        prompt: str,
        image: Union[str, Path, bytes],
        model: Optional[str] = None,
        system: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> str:
        """
        Vision completion for outfit rating.

        Args:
            prompt: User message
            image: Raw base64 (as sent by the upload form), data URL, http(s)
                URL, file path, or bytes
            model: Vision model (defaults to vision_model)
            system: System message
            temperature: Sampling temperature
            max_tokens: Completion limit

        Returns:
            Model text, or "" on error
        """
        image_part = await self.image_content(image)
        if image_part is None:
            return ""

        messages = [{"role": "system", "content": system}] if system else []
        messages.append(
            {"role": "user", "content": [{"type": "text", "text": prompt}, image_part]}
        )
        return await self._complete(
            model or self.config.vision_model, messages, temperature, max_tokens, "vision"
        )

    async def image_content(self, image: Union[str, Path, bytes]) -> Optional[dict]:
        """Build the image_url message part; None if the image cannot be read."""
        if isinstance(image, bytes):
            b64 = base64.b64encode(image).decode("utf-8")
            return _image_part(sniff_base64_mime(b64), b64)

        if isinstance(image, str):
            value = image.strip()
            if value.startswith("data:image/"):
                return {"type": "image_url", "image_url": {"url": value}}
            if value.startswith(("http://", "https://")):
                return await self._download_image(value)
            if not _looks_like_path(value):
                return _image_part(sniff_base64_mime(value), value)

        path = Path(image)
        try:
            b64 = base64.b64encode(path.read_bytes()).decode("utf-8")
        except OSError as e:
            console.print(f"[red]Could not read image {escape(str(path))}: {escape(str(e))}[/red]")
            return None
        return _image_part(SUFFIX_MIME_TYPES.get(path.suffix.lower(), sniff_base64_mime(b64)), b64)

    async def _download_image(self, url: str) -> dict:
        # Storage URLs are inlined; the API is handed the URL if the download fails
        try:
            async with httpx.AsyncClient(
                timeout=self.config.download_timeout_seconds, follow_redirects=True
            ) as client:
                resp = await client.get(url)
                resp.raise_for_status()
        except httpx.HTTPError as e:
            console.print(f"[yellow]Could not download image, passing URL: {escape(str(e))}[/yellow]")
            return {"type": "image_url", "image_url": {"url": url}}

        content_type = (resp.headers.get("content-type") or "").split(";")[0].strip().lower()
        b64 = base64.b64encode(resp.content).decode("utf-8")
        mime = content_type if content_type.startswith("image/") else sniff_base64_mime(b64)
        return _image_part(mime, b64)


def _looks_like_path(value: str) -> bool:
    if len(value) > 255:
        return False
    path = Path(value)
    return path.suffix.lower() in SUFFIX_MIME_TYPES or path.exists()
