# SPDX-License-Identifier: AGPL-3.0-only

"""
Configuration service for ToolHub.

Centralizes the settings for the OCR pipeline, the language model providers,
the writing tool and the HTTP layer. Values come from environment variables
(or a ``.env`` file) and fall back to the defaults below.
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ToolHubConfig(BaseSettings):
    """Configuration settings for the ToolHub API."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Provider credentials
    mistral_api_key: Optional[str] = Field(default=None, description="Mistral API key (OCR and HTML formatting)")
    groq_api_key: Optional[str] = Field(default=None, description="Groq API key (table reshaping and writing)")
    mistral_base_url: str = Field(default="https://api.mistral.ai/v1", description="Mistral API base URL")
    groq_base_url: str = Field(default="https://api.groq.com/openai/v1", description="Groq API base URL")

    # OCR settings
    ocr_model: str = Field(default="mistral-ocr-latest", description="Vision OCR model")
    ocr_timeout: int = Field(default=120, description="Per-attempt OCR timeout in seconds")
    ocr_max_attempts: int = Field(default=3, description="OCR attempts per page")
    ocr_retry_delay: float = Field(default=2.0, description="Fixed pause between OCR attempts in seconds")
    page_delay: float = Field(default=0.5, description="Pause between pages of a multi-page request in seconds")

    # Reshape settings
    html_model: str = Field(default="mistral-large-latest", description="Model that formats OCR text as HTML")
    html_max_tokens: int = Field(default=16000, description="Max tokens for the HTML answer")
    table_model: str = Field(default="llama-3.3-70b-versatile", description="Model that infers tables from OCR text")
    table_max_tokens: int = Field(default=8192, description="Max tokens for the table answer")
    csv_model: str = Field(
        default="meta-llama/llama-4-maverick-17b-128e-instruct",
        description="Vision model that reads tables straight from an image as CSV"
    )
    csv_max_tokens: int = Field(default=4096, description="Max tokens for the CSV answer")
    reshape_timeout: int = Field(default=120, description="Reshape call timeout in seconds")

    # Writing settings
    writing_model: str = Field(default="moonshotai/kimi-k2-instruct-0905", description="Writing model")
    writing_max_tokens: int = Field(default=4096, description="Max tokens for generated text")
    writing_temperature: float = Field(default=0.7, description="Writing sampling temperature")

    # HTTP settings
    cors_origin: str = Field(default="http://localhost:4200", description="Comma-separated allowed origins")
    max_content_length: int = Field(default=50 * 1024 * 1024, description="Max request size in bytes (50MB)")
    log_level: str = Field(default="INFO", description="Root log level")

    def get_ocr_config(self) -> dict:
        """Get OCR client configuration."""
        return {
            "api_key": self.mistral_api_key,
            "base_url": self.mistral_base_url,
            "model": self.ocr_model,
            "timeout": self.ocr_timeout,
            "max_attempts": self.ocr_max_attempts,
            "retry_delay": self.ocr_retry_delay,
        }

    def get_reshape_config(self) -> dict:
        """Get configuration for the second-stage models."""
        return {
            "html": {
                "provider": "mistral",
                "model": self.html_model,
                "max_tokens": self.html_max_tokens,
            },
            "table": {
                "provider": "groq",
                "model": self.table_model,
                "max_tokens": self.table_max_tokens,
            },
            "csv": {
                "provider": "groq",
                "model": self.csv_model,
                "max_tokens": self.csv_max_tokens,
            },
            "timeout": self.reshape_timeout,
        }

    def get_provider_keys(self) -> dict:
        """Get API key and base URL per provider."""
        return {
            "mistral": {"api_key": self.mistral_api_key, "base_url": self.mistral_base_url},
            "groq": {"api_key": self.groq_api_key, "base_url": self.groq_base_url},
        }

    def get_cors_origins(self) -> List[str]:
        """Allowed origins without trailing slashes."""
        return [o.strip().rstrip("/") for o in self.cors_origin.split(",") if o.strip()]

    def validate_ai_config(self) -> bool:
        """Validate that every provider in use has a key."""
        return bool(self.mistral_api_key) and bool(self.groq_api_key)


# Global configuration instance
config = ToolHubConfig()
