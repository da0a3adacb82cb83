from functools import lru_cache
from pathlib import Path
from typing import Literal, Tuple
import os

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field


PROJECT_ROOT = Path(__file__).resolve().parent.parent
DEV_VARS_PATH = PROJECT_ROOT / ".dev.vars"
_ENV_LOADED = False


def _load_env() -> None:
    """Load the local development file without overriding real environment variables."""
    global _ENV_LOADED
    if _ENV_LOADED:
        return
    override_path = os.environ.get("KOTOBA_DEV_VARS")
    candidates = [Path(override_path)] if override_path else [DEV_VARS_PATH, PROJECT_ROOT / ".env"]
    for path in candidates:
        if path.exists():
            load_dotenv(dotenv_path=path, override=False)
            break
    _ENV_LOADED = True


def _as_bool(value: str | int | None, default: bool) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return bool(value)
    value = value.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _as_int(value: str | int | None, default: int) -> int:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    try:
        return int(value.strip())
    except ValueError:
        return default


def _as_float(value: str | float | int | None, default: float) -> float:
    if value is None:
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(value.strip())
    except ValueError:
        return default


def _as_tuple(value: str | None, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value:
        return default
    items = tuple(item.strip() for item in value.split(",") if item.strip())
    return items or default


class Credentials(BaseModel):
    model_config = ConfigDict(frozen=True)

    username: str = Field(default="")
    password: str = Field(default="")

    @property
    def configured(self) -> bool:
        return bool(self.username and self.password)


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    credentials: Credentials = Field(default_factory=Credentials)
    base_url: str = Field(default="localhost:3000")
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=8787)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")

    # Hosted API (OpenAI)
    openai_key: str = Field(default="")
    openai_model: str = Field(default="gpt-4o-mini-2024-07-18")
    tts_default_voice: str = Field(default="alloy")
    tts_default_model: str = Field(default="tts-1")

    # Workers AI binding, reached through the Cloudflare REST API
    cf_account_id: str = Field(default="")
    cf_api_token: str = Field(default="")
    cf_model: str = Field(default="@cf/meta/llama-3.1-8b-instruct")
    cf_api_base: str = Field(default="https://api.cloudflare.com/client/v4")

    max_tokens: int = Field(default=512)
    stream_char_delay_ms: float = Field(default=20.0)
    upstream_timeout_sec: float = Field(default=60.0)
    cors_origins: Tuple[str, ...] = Field(default=("*",))

    log_metrics: bool = Field(default=False)
    metrics_jl_path: str = Field(default="logs/metrics.jl")

    @property
    def openai_configured(self) -> bool:
        return bool(self.openai_key)

    @property
    def workers_ai_configured(self) -> bool:
        return bool(self.cf_account_id and self.cf_api_token)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    _load_env()
    return Settings(
        credentials=Credentials(
            username=os.environ.get("AUTH_USERNAME", ""),
            password=os.environ.get("AUTH_PASSWORD", ""),
        ),
        base_url=os.environ.get("BASE_URL", "localhost:3000"),
        bind_host=os.environ.get("BIND_HOST", "127.0.0.1"),
        port=_as_int(os.environ.get("PORT"), 8787),
        log_level=os.environ.get("LOG_LEVEL", "INFO").upper(),
        openai_key=os.environ.get("OPENAI_KEY") or os.environ.get("OPENAI_API_KEY", ""),
        openai_model=os.environ.get("OPENAI_MODEL", "gpt-4o-mini-2024-07-18"),
        tts_default_voice=os.environ.get("TTS_DEFAULT_VOICE", "alloy"),
        tts_default_model=os.environ.get("TTS_DEFAULT_MODEL", "tts-1"),
        cf_account_id=os.environ.get("CF_ACCOUNT_ID", ""),
        cf_api_token=os.environ.get("CF_API_TOKEN", ""),
        cf_model=os.environ.get("CF_MODEL", "@cf/meta/llama-3.1-8b-instruct"),
        cf_api_base=os.environ.get("CF_API_BASE", "https://api.cloudflare.com/client/v4"),
        max_tokens=_as_int(os.environ.get("MAX_TOKENS"), 512),
        stream_char_delay_ms=_as_float(os.environ.get("STREAM_CHAR_DELAY_MS"), 20.0),
        upstream_timeout_sec=_as_float(os.environ.get("UPSTREAM_TIMEOUT_SEC"), 60.0),
        cors_origins=_as_tuple(os.environ.get("CORS_ORIGINS"), ("*",)),
        log_metrics=_as_bool(os.environ.get("LOG_METRICS"), False),
        metrics_jl_path=os.environ.get("METRICS_JL_PATH", "logs/metrics.jl"),
    )
