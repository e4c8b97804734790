"""Central configuration for the childcare Q&A client.

A typed Settings object (pydantic-settings) is used for dependency injection
in the API and the conversation service. Module-level constants hold the
fixed copy and option lists shared by the request builder and projectors.
"""

from dotenv import load_dotenv, find_dotenv
import os
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables once for the whole app
load_dotenv(find_dotenv())


def _sanitize_base(value: Optional[str]) -> Optional[str]:
    use = (value or "").strip().rstrip("/")
    if not use:
        return None
    if not (use.startswith("http://") or use.startswith("https://")):
        use = "https://" + use
    return use


class Settings(BaseSettings):
    """Runtime settings for the client and the page host.

    Values are loaded from environment variables and optional .env files.
    """

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    APP_NAME: str = "ChildCare Q&A"
    ENV: str = "dev"

    # Absent => same-origin relative paths ("/chat", "/api/cost")
    API_BASE: Optional[str] = None
    # Origin that relative paths are resolved against
    SITE_ORIGIN: str = "http://127.0.0.1:8000"
    REQUEST_TIMEOUT_S: float = 30.0

    DEFAULT_REGION: str = "PA"
    DEFAULT_INTENT: str = "LOOKUP_RULE"
    # Oldest page-view sessions are dropped past this many
    MAX_SESSIONS: int = 1000

    def api_base(self) -> Optional[str]:
        return _sanitize_base(self.API_BASE)


def get_settings() -> Settings:
    return Settings()


# Paths
PROJECT_ROOT = os.path.dirname(os.path.dirname(__file__))  # repo root

# Endpoints (relative to API_BASE, or same-origin when unset)
CHAT_PATH = "/chat"
COST_PATH = "/api/cost"

# Placeholder rendered for missing values in every table
EMPTY_CELL = "—"

# Query sent when a cost request carries no free text
DEFAULT_COST_QUERY = "Cost estimate"

# Citation label of the cost survey dataset
COST_DATASET_LABEL = "NDCP 2022"

# Age-group order inside a cost table; anything else sorts last
AGE_GROUP_ORDER = {"infant": 1, "toddler": 2, "preschool": 3}
AGE_GROUP_FALLBACK_RANK = 9

# Direct estimator choices
COST_AGE_GROUPS = ("infant", "toddler", "preschool", "school-age", "mixed")
COST_SETTINGS = ("center", "family")
COST_METRICS = ("median", "p75")
COST_UNITS = ("monthly", "weekly")
