"""Runtime configuration for FixMyHood, read from the environment and `.env`."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """FixMyHood settings.

    Every field maps to the upper-case environment variable named in its alias.
    Thresholds for duplicate detection and badges live here so deployments can
    tune them without code changes.
    """

    # Application metadata
    app_name: str = Field(default="FixMyHood", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Security and authentication
    secret_key: str = Field(alias="SECRET_KEY")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    jwt_audience: str | None = Field(default=None, alias="JWT_AUDIENCE")
    access_token_expire_minutes: int = Field(
        default=60 * 24 * 7,
        alias="ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    admin_secret_code: str | None = Field(default=None, alias="ADMIN_SECRET_CODE")

    # Database configuration
    database_url: str = Field(default="sqlite:///./fixmyhood.db", alias="DATABASE_URL")
    test_database_url: str | None = Field(default=None, alias="TEST_DATABASE_URL")
    use_testing_database: bool = Field(default=False, alias="USE_TEST_DATABASE")
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Redis configuration for write cooldowns
    redis_url: str = Field(default="redis://localhost:6379", alias="REDIS_URL")
    rate_limit_enabled: bool = Field(default=True, alias="RATE_LIMIT_ENABLED")
    report_cooldown_seconds: int = Field(default=60, alias="REPORT_COOLDOWN_SECONDS")
    comment_cooldown_seconds: int = Field(default=10, alias="COMMENT_COOLDOWN_SECONDS")
    flag_cooldown_seconds: int = Field(default=30, alias="FLAG_COOLDOWN_SECONDS")

    # Duplicate detection
    duplicate_pool_size: int = Field(default=50, alias="DUPLICATE_POOL_SIZE")
    duplicate_min_title_length: int = Field(default=5, alias="DUPLICATE_MIN_TITLE_LENGTH")
    duplicate_min_token_overlap: int = Field(default=2, alias="DUPLICATE_MIN_TOKEN_OVERLAP")
    duplicate_radius_km: float = Field(default=2.0, alias="DUPLICATE_RADIUS_KM")
    duplicate_max_results: int = Field(default=3, alias="DUPLICATE_MAX_RESULTS")
    duplicate_debounce_seconds: float = Field(default=0.8, alias="DUPLICATE_DEBOUNCE_SECONDS")

    # Gamification thresholds
    verification_threshold: int = Field(default=3, alias="VERIFICATION_THRESHOLD")
    helper_comment_threshold: int = Field(default=5, alias="HELPER_COMMENT_THRESHOLD")
    resolver_fix_threshold: int = Field(default=2, alias="RESOLVER_FIX_THRESHOLD")

    # Blob storage for report and comment photos
    upload_dir: str = Field(default="static/uploads", alias="UPLOAD_DIR")
    upload_url_prefix: str = Field(default="/static/uploads", alias="UPLOAD_URL_PREFIX")
    upload_max_bytes: int = Field(default=5 * 1024 * 1024, alias="UPLOAD_MAX_BYTES")

    # CORS configuration for web frontend access
    cors_origins: list[str] = Field(
        default=["*"],
        alias="CORS_ORIGINS",
    )
    cors_allow_credentials: bool = Field(default=True, alias="CORS_ALLOW_CREDENTIALS")
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
        alias="CORS_ALLOW_METHODS",
    )
    cors_allow_headers: list[str] = Field(
        default=["*"],
        alias="CORS_ALLOW_HEADERS",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        validate_assignment=True,
        extra="ignore",
    )

    @property
    def database_url_sync(self) -> str:
        """Return the database URL with a driver SQLAlchemy and Alembic accept.

        Hosting providers often hand out ``postgres://`` URLs, which SQLAlchemy
        no longer recognises.
        """
        url = self.effective_database_url
        if url.startswith("postgres://"):
            return "postgresql+psycopg://" + url[len("postgres://"):]
        return url

    @property
    def effective_database_url(self) -> str:
        """Return the database URL respecting testing overrides."""
        if self.use_testing_database and self.test_database_url:
            return self.test_database_url
        return self.database_url

    @property
    def cooldowns(self) -> dict[str, int]:
        """Return per-action write cooldowns keyed by action name."""
        return {
            "report": self.report_cooldown_seconds,
            "comment": self.comment_cooldown_seconds,
            "flag": self.flag_cooldown_seconds,
        }


settings = Settings()  # type: ignore[call-arg]
