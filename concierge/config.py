"""Configuration management for the dispatch service."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


@dataclass(frozen=True)
class OpenAIConfig:
    """OpenAI (or OpenAI-compatible) API configuration."""

    api_key: str
    base_url: Optional[str] = None
    max_concurrent: int = 50


@dataclass(frozen=True)
class AzureOpenAIConfig:
    """Azure OpenAI service configuration."""

    api_key: str
    endpoint: str
    api_version: str = "2024-02-15-preview"
    max_concurrent: int = 50


@dataclass(frozen=True)
class ModelNames:
    """Model names used by the root agent and its helpers."""

    root: str = "gpt-4"
    classifier: str = "gpt-4"
    summary: str = "gpt-3.5-turbo"

    def all(self) -> Tuple[str, ...]:
        return tuple(dict.fromkeys((self.root, self.classifier, self.summary)))


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables."""

    openai: Optional[OpenAIConfig] = None
    azure_openai: Optional[AzureOpenAIConfig] = None
    models: ModelNames = field(default_factory=ModelNames)
    specialists: Tuple[str, ...] = ()
    log_level: str = "INFO"
    environment: str = "development"

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""
        openai_key = os.getenv("OPENAI_API_KEY")
        azure_key = os.getenv("AZURE_OPENAI_KEY")
        azure_endpoint = os.getenv("AZURE_OPENAI_ENDPOINT")

        openai_config = None
        if openai_key:
            openai_config = OpenAIConfig(
                api_key=openai_key,
                base_url=os.getenv("OPENAI_BASE_URL") or None,
                max_concurrent=int(os.getenv("OPENAI_MAX_CONCURRENT", "50")),
            )

        azure_config = None
        if azure_key and azure_endpoint:
            azure_config = AzureOpenAIConfig(
                api_key=azure_key,
                endpoint=azure_endpoint,
                api_version=os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
                max_concurrent=int(os.getenv("AZURE_OPENAI_MAX_CONCURRENT", "50")),
            )

        models = ModelNames(
            root=os.getenv("CONCIERGE_ROOT_MODEL", "gpt-4"),
            classifier=os.getenv("CONCIERGE_CLASSIFIER_MODEL", "gpt-4"),
            summary=os.getenv("CONCIERGE_SUMMARY_MODEL", "gpt-3.5-turbo"),
        )

        specialists = tuple(
            item.strip()
            for item in os.getenv("CONCIERGE_SPECIALISTS", "").split(",")
            if item.strip()
        )

        return cls(
            openai=openai_config,
            azure_openai=azure_config,
            models=models,
            specialists=specialists,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            environment=os.getenv("ENVIRONMENT", "development"),
        )


# Global config instance
config = Config.from_env()
