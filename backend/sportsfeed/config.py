"""
backend/sportsfeed/config.py

Purpose:
    Central settings loading for the aggregator: storage, provider credentials,
    fetch/retry tuning, cache TTLs, circuit-breaker thresholds and provider
    priority tables.

Dependencies:
    - pydantic-settings
    - pathlib
"""

from pathlib import Path

from pydantic_settings import BaseSettings

# Prefer backend/.env, fallback to project-root .env.
_BACKEND_ENV_FILE = Path(__file__).resolve().parent.parent / ".env"
_ROOT_ENV_FILE = Path(__file__).resolve().parent.parent.parent / ".env"


def _split_csv(raw: str) -> list[str]:
    return [part.strip().lower() for part in str(raw or "").split(",") if part.strip()]


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"
    MONGO_DB: str = "sportsfeed"
    BACKEND_CORS_ORIGINS: str = "http://localhost:5173"

    # Provider credentials (empty = provider needs configuration)
    FOOTBALL_DATA_ORG_API_KEY: str = ""
    SM_API_KEY: str = ""
    API_FOOTBALL_KEY: str = ""
    RAPIDAPI_KEY: str = ""  # RapidAPI gateway variant of API-Football

    # Provider base URLs
    FOOTBALL_DATA_ORG_BASE_URL: str = "https://api.football-data.org/v4"
    SPORTMONKS_BASE_URL: str = "https://api.sportmonks.com/v3"
    API_FOOTBALL_BASE_URL: str = "https://v3.football.api-sports.io"
    API_FOOTBALL_RAPIDAPI_BASE_URL: str = "https://api-football-v1.p.rapidapi.com/v3"
    API_FOOTBALL_RAPIDAPI_HOST: str = "api-football-v1.p.rapidapi.com"
    OPENLIGADB_BASE_URL: str = "https://api.openligadb.de"
    ESPN_BASE_URL: str = "https://site.api.espn.com/apis"

    # Fetch client
    FETCH_TIMEOUT_SECONDS: float = 15.0
    FETCH_MAX_RETRIES: int = 3

    # Response cache TTLs (live data is volatile, tables move slowly)
    CACHE_TTL_LIVE_SECONDS: int = 120
    CACHE_TTL_UPCOMING_SECONDS: int = 300
    CACHE_TTL_ODDS_SECONDS: int = 600
    CACHE_TTL_STANDINGS_SECONDS: int = 1800
    CACHE_TTL_LEAGUES_SECONDS: int = 300

    # Provider health / circuit breaker
    HEALTH_FAILURE_THRESHOLD: int = 3
    HEALTH_FAILURE_WINDOW_SECONDS: int = 300
    HEALTH_COOLDOWN_SECONDS: int = 120
    HEALTH_RATE_LIMIT_COOLDOWN_SECONDS: int = 300
    HEALTH_AUTH_COOLDOWN_SECONDS: int = 1800
    HEALTH_RECORD_TTL_SECONDS: int = 3600

    # Provider priority per operation (first success wins)
    PROVIDER_PRIORITY_LIVE: str = "football_data,sportmonks,api_sports,openligadb,espn,demo"
    PROVIDER_PRIORITY_UPCOMING: str = "sportmonks,football_data,demo"
    PROVIDER_PRIORITY_ODDS: str = "sportmonks,api_sports,demo"
    PROVIDER_PRIORITY_STANDINGS: str = "sportmonks,football_data,api_sports,openligadb,espn,demo"
    PROVIDER_PRIORITY_LEAGUES: str = "football_data,sportmonks,api_sports"

    # Static enablement; runtime overrides live in the provider_toggles collection
    PROVIDERS_DISABLED: str = ""
    PROVIDER_TOGGLE_CACHE_TTL: int = 15

    # Synthetic fixtures, test mode only
    DEMO_DATA_ENABLED: bool = False

    # Cache warm-up
    PREFETCH_ENABLED: bool = False
    PREFETCH_INTERVAL_SECONDS: int = 60
    PREFETCH_LEAGUE_IDS: str = "39,140,135,61,78,2"

    model_config = {
        "env_file": (str(_BACKEND_ENV_FILE), str(_ROOT_ENV_FILE)),
        "extra": "ignore",
    }

    def provider_priority(self, operation: str) -> list[str]:
        raw = {
            "live": self.PROVIDER_PRIORITY_LIVE,
            "upcoming": self.PROVIDER_PRIORITY_UPCOMING,
            "odds": self.PROVIDER_PRIORITY_ODDS,
            "standings": self.PROVIDER_PRIORITY_STANDINGS,
            "leagues": self.PROVIDER_PRIORITY_LEAGUES,
        }.get(str(operation or "").lower(), "")
        return _split_csv(raw)

    def disabled_providers(self) -> set[str]:
        return set(_split_csv(self.PROVIDERS_DISABLED))

    def prefetch_league_ids(self) -> list[str]:
        return [part.strip() for part in self.PREFETCH_LEAGUE_IDS.split(",") if part.strip()]


settings = Settings()
