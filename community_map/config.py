"""
Central configuration loaded from environment variables with sensible defaults.
All secrets come from env vars; no hardcoded credentials.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass(frozen=True)
class PlanningCenterConfig:
    client_id: str = os.getenv("PLANNING_CENTER_CLIENT_ID", "")
    secret: str = os.getenv("PLANNING_CENTER_SECRET", "")
    base_url: str = os.getenv("PLANNING_CENTER_API_URL", "https://api.planningcenteronline.com")
    groups_endpoint: str = "/groups/v2/groups"
    page_size: int = int(os.getenv("PLANNING_CENTER_PAGE_SIZE", "100"))
    max_pages: int = int(os.getenv("PLANNING_CENTER_MAX_PAGES", "20"))  # safety cap
    request_timeout: int = int(os.getenv("PLANNING_CENTER_TIMEOUT", "30"))
    max_retries: int = int(os.getenv("PLANNING_CENTER_MAX_RETRIES", "3"))
    user_agent: str = os.getenv("PLANNING_CENTER_USER_AGENT", "Table Church Community Map")

    @property
    def has_credentials(self) -> bool:
        return bool(self.client_id) and bool(self.secret)


@dataclass(frozen=True)
class EligibilityConfig:
    """Which upstream groups the proxy forwards. Archived groups are always dropped."""
    require_open_enrollment: bool = _env_bool("GROUPS_REQUIRE_OPEN_ENROLLMENT", "true")
    require_public_url: bool = _env_bool("GROUPS_REQUIRE_PUBLIC_URL", "true")


@dataclass(frozen=True)
class RepositoryConfig:
    # Where the map side reaches the proxy
    base_url: str = os.getenv("GROUPS_PROXY_URL", "http://localhost:8000")
    request_timeout: float = float(os.getenv("GROUPS_PROXY_TIMEOUT", "15"))


@dataclass(frozen=True)
class ClassifierConfig:
    # Empty means the keyword sets packaged with community_map
    keywords_path: str = os.getenv("CLASSIFIER_KEYWORDS_PATH", "")


@dataclass(frozen=True)
class APIConfig:
    host: str = os.getenv("API_HOST", "0.0.0.0")
    port: int = int(os.getenv("API_PORT", "8000"))


@dataclass(frozen=True)
class Settings:
    planning_center: PlanningCenterConfig = field(default_factory=PlanningCenterConfig)
    eligibility: EligibilityConfig = field(default_factory=EligibilityConfig)
    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    env: str = os.getenv("APP_ENV", "development")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
