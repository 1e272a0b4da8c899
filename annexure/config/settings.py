"""Environment-driven configuration for the annexure service."""

import os
from functools import lru_cache
from typing import Optional
from pydantic import BaseModel, Field
from dotenv import load_dotenv

load_dotenv()

DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_MODEL = "google/gemini-2.5-flash"


class Settings(BaseModel):
    """Runtime settings resolved from the environment."""

    openrouter_api_key: Optional[str] = Field(None, description="OpenRouter API key")
    openrouter_base_url: str = Field(DEFAULT_OPENROUTER_BASE_URL, description="OpenRouter API base URL")
    extraction_model: str = Field(DEFAULT_MODEL, description="Vision model used for bill extraction")
    anomaly_model: str = Field(DEFAULT_MODEL, description="Vision model used for the anomaly check")
    request_timeout: float = Field(120.0, gt=0, description="Timeout in seconds for remote calls")
    pdf_render_zoom: float = Field(1.5, gt=0, description="Zoom factor used when rasterizing PDF pages")
    site_url: str = Field("https://annexure-generator.app", description="Attribution URL sent to OpenRouter")
    site_name: str = Field("PDF Bill Annexure Generator", description="Attribution title sent to OpenRouter")
    log_level: str = Field("INFO", description="Root logging level")


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


@lru_cache
def get_settings() -> Settings:
    """Get the settings instance, reading the environment on first use."""
    values = {
        "openrouter_api_key": _env("OPEN_ROUTER_API_KEY"),
        "openrouter_base_url": _env("OPENROUTER_BASE_URL"),
        "extraction_model": _env("EXTRACTION_MODEL"),
        "request_timeout": _env("OPENROUTER_TIMEOUT"),
        "pdf_render_zoom": _env("PDF_RENDER_ZOOM"),
        "site_url": _env("SITE_URL"),
        "site_name": _env("SITE_NAME"),
        "log_level": _env("LOG_LEVEL"),
    }
    # The anomaly check falls back to whichever extraction model is configured
    values["anomaly_model"] = _env("ANOMALY_MODEL") or values["extraction_model"]

    return Settings(**{key: value for key, value in values.items() if value is not None})
