"""Run settings loaded from the environment (and .env via python-dotenv)."""

import os
from pathlib import Path
from typing import Mapping

from pydantic import BaseModel, ValidationError, field_validator

from errors import ConfigError

# Environment variable -> Settings field
ENV_FIELDS: dict[str, str] = {
    "TARGET_URL": "target_url",
    "LOGIN_EMAIL": "login_email",
    "LOGIN_PASSWORD": "login_password",
    "LOGIN_PATH": "login_path",
    "PAGES_TO_CRAWL": "pages_to_crawl",
    "MASK_SELECTORS": "mask_selectors",
    "OPENAI_API_KEY": "openai_api_key",
    "LLM_MODEL": "llm_model",
    "LLM_VISION_MODEL": "llm_vision_model",
    "LLM_TEMPERATURE": "llm_temperature",
    "LLM_RETRY_TEMPERATURE": "llm_retry_temperature",
    "LLM_MAX_TOKENS": "llm_max_tokens",
    "LLM_TIMEOUT": "llm_timeout",
    "MAX_ATTEMPTS": "max_attempts",
    "CRAWL_TIMEOUT": "crawl_timeout_ms",
    "PAGE_SETTLE_MS": "page_settle_ms",
    "VIEWPORT_WIDTH": "viewport_width",
    "VIEWPORT_HEIGHT": "viewport_height",
    "HEADLESS": "headless",
    "DOM_DEPTH_CAP": "dom_depth_cap",
    "OUTPUT_DIR": "output_dir",
    "APP_DIR": "app_dir",
    "GENERATION_BATCH_SIZE": "batch_size",
    "GENERATION_BATCH_DELAY": "batch_delay",
    "ATTACH_SCREENSHOTS": "attach_screenshots",
    "FAIL_ON_DEFECTS": "fail_on_defects",
    "REQUIRE_HUMAN_REVIEW": "require_human_review",
    "METRICS_PORT": "metrics_port",
    "DATABASE_URL": "database_url",
}

# Keys each CLI mode cannot run without
REQUIRED_BY_MODE: dict[str, tuple[str, ...]] = {
    "run": ("TARGET_URL", "OPENAI_API_KEY"),
    "regenerate": ("OPENAI_API_KEY",),
    "validate": (),
    "history": (),
}


class Settings(BaseModel):
    # Crawl
    target_url: str | None = None
    login_email: str | None = None
    login_password: str | None = None
    login_path: str = "/login"
    pages_to_crawl: list[str] = ["/"]
    mask_selectors: list[str] = []
    crawl_timeout_ms: int = 120_000
    page_settle_ms: int = 8_000
    viewport_width: int = 1920
    viewport_height: int = 1080
    headless: bool = True
    dom_depth_cap: int = 5
    # Generation
    openai_api_key: str | None = None
    llm_model: str = "gpt-4o"
    llm_vision_model: str = "gpt-4o"
    llm_temperature: float = 0.3
    llm_retry_temperature: float = 0.2
    llm_max_tokens: int = 4000
    llm_timeout: float = 120.0
    max_attempts: int = 3
    batch_size: int = 1
    batch_delay: float = 0.0
    attach_screenshots: bool = True
    fail_on_defects: bool = False
    # Output
    output_dir: Path = Path("output")
    app_dir: Path = Path("generated-app")
    require_human_review: bool = False
    # Ambient
    metrics_port: int = 9090
    database_url: str = "sqlite:///runs.db"

    @field_validator("pages_to_crawl", "mask_selectors", mode="before")
    @classmethod
    def _split_csv(cls, value):
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        return value

    @field_validator("target_url")
    @classmethod
    def _strip_trailing_slash(cls, value):
        return value.rstrip("/") if value else value

    @field_validator("max_attempts", "batch_size", "dom_depth_cap")
    @classmethod
    def _at_least_one(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be >= 1")
        return value

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "Settings":
        """Build settings from environment variables. Empty values count as unset."""
        environ = os.environ if environ is None else environ
        data = {
            field: environ[key]
            for key, field in ENV_FIELDS.items()
            if environ.get(key, "").strip()
        }
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            fields = {field: key for key, field in ENV_FIELDS.items()}
            bad = ", ".join(
                fields.get(str(err["loc"][0]), str(err["loc"][0])) for err in exc.errors()
            )
            raise ConfigError(f"Invalid configuration value(s): {bad}") from exc

    @property
    def has_credentials(self) -> bool:
        return bool(self.login_email and self.login_password)

    def require_for(self, mode: str) -> None:
        """Raise ConfigError listing every key *mode* needs but is unset."""
        missing = [
            key for key in REQUIRED_BY_MODE.get(mode, ())
            if not getattr(self, ENV_FIELDS[key])
        ]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}\n"
                "Copy .env.example to .env and fill in the values."
            )
