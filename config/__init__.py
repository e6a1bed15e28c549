"""Project configuration."""

from .settings import (
    AppConfig,
    ExtractionConfig,
    LoggingConfig,
    RecoveryConfig,
    SupabaseConfig,
    config,
)

__all__ = [
    "AppConfig",
    "ExtractionConfig",
    "LoggingConfig",
    "RecoveryConfig",
    "SupabaseConfig",
    "config",
]
