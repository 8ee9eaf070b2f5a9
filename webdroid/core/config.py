"""
Configuration management for webdroid.

Provides centralized, type-safe configuration with environment variable overrides
and sensible defaults for the AI clients, the assembler and delivery storage.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, Field, SecretStr

# Load .env file if it exists (looks in cwd and parent directories)
load_dotenv()


class AgentConfig(BaseModel):
    """LLM agent configuration."""

    provider: Literal["openai", "anthropic", "azure_openai"] = Field(
        default="openai", description="LLM provider"
    )
    # Azure OpenAI specific settings
    azure_endpoint: str | None = Field(default=None, description="Azure OpenAI endpoint URL")
    azure_api_version: str = Field(default="2024-02-15-preview", description="Azure OpenAI API version")
    azure_deployment_name: str | None = Field(default=None, description="Azure OpenAI deployment name")
    model: str = Field(default="gpt-4o", description="Model used for permission analysis")
    image_model: str = Field(default="dall-e-3", description="Model used for icon generation")
    image_size: Literal["256x256", "512x512", "1024x1024"] = Field(
        default="1024x1024", description="Requested icon resolution"
    )
    temperature: float = Field(default=0.1, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=4096, ge=256, description="Max output tokens")
    timeout_seconds: int = Field(default=120, ge=10, description="Request timeout")


class AnalysisConfig(BaseModel):
    """Permission inference and icon fallback settings."""

    max_source_chars: int = Field(
        default=15000, ge=1000, description="Markup prefix length sent for analysis"
    )
    placeholder_icon_url: str = Field(
        default="https://picsum.photos/512/512",
        description="Remote image referenced when icon generation fails",
    )


class AssemblyConfig(BaseModel):
    """Output project settings."""

    icon_density: str = Field(default="xxhdpi", description="Single mipmap bucket icons are written to")
    icon_size_px: int = Field(default=144, ge=48, le=512, description="Launcher icon edge length")
    archive_suffix: str = Field(default="_AndroidProject.zip", description="Delivered archive name suffix")


class StorageConfig(BaseModel):
    """Storage configuration for delivered archives."""

    base_path: Path = Field(
        default=Path("./output"), description="Directory delivered archives are written to"
    )


class Config(BaseModel):
    """Root configuration for webdroid."""

    project_name: str = Field(default="webdroid", description="Project identifier")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging level"
    )
    agent: AgentConfig = Field(default_factory=AgentConfig)
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    assembly: AssemblyConfig = Field(default_factory=AssemblyConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)

    # API Keys (loaded from environment)
    openai_api_key: SecretStr | None = Field(
        default_factory=lambda: SecretStr(os.environ.get("OPENAI_API_KEY", "")) or None
    )
    anthropic_api_key: SecretStr | None = Field(
        default_factory=lambda: SecretStr(os.environ.get("ANTHROPIC_API_KEY", "")) or None
    )
    azure_openai_api_key: SecretStr | None = Field(
        default_factory=lambda: SecretStr(os.environ.get("AZURE_OPENAI_API_KEY", "")) or None
    )

    model_config = {"extra": "ignore"}

    @classmethod
    def from_env(cls) -> Config:
        """Create configuration from environment variables."""
        return cls(
            log_level=os.environ.get("WEBDROID_LOG_LEVEL", "INFO"),  # type: ignore
            agent=AgentConfig(
                provider=os.environ.get("WEBDROID_AGENT_PROVIDER", "openai"),  # type: ignore
                model=os.environ.get("WEBDROID_AGENT_MODEL", "gpt-4o"),
                image_model=os.environ.get("WEBDROID_IMAGE_MODEL", "dall-e-3"),
                temperature=float(os.environ.get("WEBDROID_AGENT_TEMPERATURE", "0.1")),
                azure_endpoint=os.environ.get("AZURE_OPENAI_ENDPOINT"),
                azure_api_version=os.environ.get("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
                azure_deployment_name=os.environ.get("AZURE_OPENAI_DEPLOYMENT_NAME"),
            ),
            analysis=AnalysisConfig(
                max_source_chars=int(os.environ.get("WEBDROID_MAX_SOURCE_CHARS", "15000")),
            ),
            storage=StorageConfig(
                base_path=Path(os.environ.get("WEBDROID_OUTPUT_PATH", "./output")),
            ),
        )


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Get cached configuration instance."""
    return Config.from_env()
