from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "GitHub Mirror"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = True
    ENV: str = "dev"  # Environment: "dev", "staging", "prod"
    CORS_ORIGINS: List[str] = ["http://localhost:4200", "http://localhost:3000"]

    # Database (MongoDB)
    MONGODB_URI: str = "mongodb://localhost:27017"
    MONGODB_DB_NAME: str = "github_mirror"
    MONGODB_SERVER_SELECTION_TIMEOUT_MS: int = 5000

    # GitHub
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_CLIENT_ID: str | None = None
    GITHUB_CLIENT_SECRET: str | None = None
    GITHUB_REDIRECT_URI: str = "http://localhost:8000/api/integrations/github/callback"
    GITHUB_SCOPES: List[str] = [
        "user:email",
        "repo",
        "read:org",
    ]
    GITHUB_HTTP_TIMEOUT: float = 30.0
    FRONTEND_BASE_URL: str = "http://localhost:4200"

    # ==========================================================================
    # Sync
    # ==========================================================================

    SYNC_PER_PAGE: int = 100  # Page size for single-repository sync
    SYNC_ALL_PER_PAGE: int = 50  # Page size per repo when syncing a whole org
    SYNC_ALL_DEFAULT_LIMIT: int = 10  # Repos synced per org when no limit given
    TIMELINE_PREFETCH_LIMIT: int = 30  # Issues whose timeline is prefetched
    TIMELINE_PREFETCH_BATCH_SIZE: int = 5  # Concurrent timeline fetches per group

    # --- Complete organization snapshot ---
    SNAPSHOT_REPO_LIMIT: int = 5
    SNAPSHOT_ITEMS_PER_KIND: int = 10
    SNAPSHOT_TIMELINE_ISSUES: int = 3

    # ==========================================================================
    # Grid
    # ==========================================================================

    GRID_DEFAULT_PAGE_SIZE: int = 100
    GRID_MAX_PAGE_SIZE: int = 1000

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
