"""Application configuration helpers."""

import logging
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Dict, Tuple

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_AI_GATEWAY_URL = "https://ai.gateway.lovable.dev/v1/chat/completions"
DEFAULT_AI_GATEWAY_MODEL = "google/gemini-2.5-flash"

# Settings field -> environment variable, for every provider credential.
CREDENTIAL_ENV = {
    "google_maps_api_key": "GOOGLE_MAPS_API_KEY",
    "scrapapi_key": "SCRAPAPI_KEY",
    "serpapi_key": "SERPAPI_KEY",
    "google_sa_email": "GOOGLE_SA_EMAIL",
    "google_sa_private_key": "GOOGLE_SA_PRIVATE_KEY",
    "ai_gateway_api_key": "AI_GATEWAY_API_KEY",
    "perplexity_api_key": "PERPLEXITY_API_KEY",
    "youtube_api_key": "YOUTUBE_API_KEY",
    "twitter_bearer_token": "TWITTER_BEARER_TOKEN",
    "github_token": "GITHUB_TOKEN",
    "pagespeed_api_key": "PAGESPEED_API_KEY",
    "semrush_api_key": "SEMRUSH_API_KEY",
}

# Credentials that only raise rate limits; their absence is not worth a warning.
_OPTIONAL_CREDENTIALS = {"github_token"}


@dataclass(frozen=True)
class Settings:
    google_maps_api_key: str = ""
    scrapapi_key: str = ""
    serpapi_key: str = ""
    google_sa_email: str = ""
    google_sa_private_key: str = ""
    ai_gateway_api_key: str = ""
    ai_gateway_url: str = DEFAULT_AI_GATEWAY_URL
    ai_gateway_model: str = DEFAULT_AI_GATEWAY_MODEL
    perplexity_api_key: str = ""
    youtube_api_key: str = ""
    twitter_bearer_token: str = ""
    github_token: str = ""
    pagespeed_api_key: str = ""
    semrush_api_key: str = ""
    database_url: str = ""
    port: int = 8080
    log_level: str = "INFO"
    log_suppress: Tuple[str, ...] = ()

    @property
    def has_service_account(self) -> bool:
        return bool(self.google_sa_email and self.google_sa_private_key)

    def credential_status(self) -> Dict[str, bool]:
        """Report which provider credentials are configured, keyed by env var name."""
        return {env: bool(getattr(self, attr)) for attr, env in CREDENTIAL_ENV.items()}


def _normalize_private_key(raw: str) -> str:
    # Secrets stores commonly keep the PEM on one line with literal "\n" escapes.
    return raw.replace("\\n", "\n").strip()


def _split_patterns(raw: str) -> Tuple[str, ...]:
    return tuple(part.strip() for part in raw.split(",") if part.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from environment variables and report missing credentials."""
    load_dotenv()

    credentials = {attr: os.getenv(env, "").strip() for attr, env in CREDENTIAL_ENV.items()}
    credentials["google_sa_private_key"] = _normalize_private_key(credentials["google_sa_private_key"])

    settings = Settings(
        **credentials,
        ai_gateway_url=os.getenv("AI_GATEWAY_URL", DEFAULT_AI_GATEWAY_URL),
        ai_gateway_model=os.getenv("AI_GATEWAY_MODEL", DEFAULT_AI_GATEWAY_MODEL),
        database_url=os.getenv("DATABASE_URL", ""),
        port=int(os.getenv("PORT", "8080")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        log_suppress=_split_patterns(os.getenv("LOG_SUPPRESS", "")),
    )

    for attr, env in CREDENTIAL_ENV.items():
        if attr not in _OPTIONAL_CREDENTIALS and not getattr(settings, attr):
            logger.warning("%s is not configured; dependent handlers will return empty results.", env)
    if not settings.database_url:
        logger.warning("DATABASE_URL is not set; report merges and property persistence will fail.")

    return settings
