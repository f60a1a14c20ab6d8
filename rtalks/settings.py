from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv
from sqlalchemy.engine import URL


# ----------------------------
# Config & Constants
# ----------------------------
PLACEHOLDER_KEY_ID = "your_key_id"
PLACEHOLDER_KEY_SECRET = "your_key_secret"
DEMO_KEY_ID = "rzp_test_demo_key"

DEFAULT_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5000",
    "http://127.0.0.1:3000",
)

# the three ticket tiers an order may name
PACKAGE_NAMES = ("Professional", "Executive", "Leadership")

SERVICE_NAME = "rtalks-backend"
VERSION = "1.0.0"


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def database_url_from_env(env=os.environ) -> str:
    # Priority: DATABASE_URL > DB_URL (legacy) > individual variables
    if env.get("DATABASE_URL"):
        return env["DATABASE_URL"]
    if env.get("DB_URL"):
        return env["DB_URL"]
    return URL.create(
        "postgresql",
        username=env.get("DB_USER", "postgres"),
        password=env.get("DB_PASSWORD") or None,
        host=env.get("DB_HOST", "localhost"),
        port=int(env.get("DB_PORT", "5432")),
        database=env.get("DB_NAME", "rtalks_db"),
    ).render_as_string(hide_password=False)


@dataclass(frozen=True)
class Settings:
    database_url: str
    environment: str = "development"
    port: int = 3000
    jwt_secret: str = "dev-secret-change-me"
    allowed_origins: Tuple[str, ...] = DEFAULT_ORIGINS

    razorpay_key_id: Optional[str] = None
    razorpay_key_secret: Optional[str] = None
    razorpay_api_url: str = "https://api.razorpay.com/v1"

    frontend_url: str = "http://localhost:3000"
    public_api_url: Optional[str] = None

    db_pool_size: int = 20
    db_pool_timeout: float = 2.0

    ratelimit_backend: str = "memory"  # 'memory' | 'redis'
    ratelimit_max: int = 100
    ratelimit_window_seconds: int = 15 * 60
    redis_url: str = "redis://127.0.0.1:6379"

    upload_dir: str = "uploads"
    seed_defaults: bool = True

    log_level: str = "INFO"
    log_dir: Optional[str] = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def payments_configured(self) -> bool:
        key_id = self.razorpay_key_id
        secret = self.razorpay_key_secret
        if not key_id or not secret:
            return False
        return (key_id != PLACEHOLDER_KEY_ID
                and secret != PLACEHOLDER_KEY_SECRET)

    @property
    def public_key_id(self) -> str:
        if self.razorpay_key_id and self.razorpay_key_id != PLACEHOLDER_KEY_ID:
            return self.razorpay_key_id
        return DEMO_KEY_ID

    @property
    def callback_base_url(self) -> str:
        return (self.public_api_url or self.frontend_url).rstrip("/")


def load_settings(env=None) -> Settings:
    if env is None:
        load_dotenv()
        env = os.environ

    origins = env.get("ALLOWED_ORIGINS")
    if origins:
        allowed = tuple(o.strip() for o in origins.split(",") if o.strip())
    else:
        allowed = DEFAULT_ORIGINS

    return Settings(
        database_url=database_url_from_env(env),
        environment=(
            env.get("NODE_ENV") or env.get("APP_ENV") or "development"
        ).lower(),
        port=int(env.get("PORT", "3000")),
        jwt_secret=env.get("JWT_SECRET", "dev-secret-change-me"),
        allowed_origins=allowed,
        razorpay_key_id=env.get("RAZORPAY_KEY_ID"),
        razorpay_key_secret=env.get("RAZORPAY_KEY_SECRET"),
        razorpay_api_url=env.get(
            "RAZORPAY_API_URL", "https://api.razorpay.com/v1"
        ),
        frontend_url=(
            env.get("FRONTEND_URL") or env.get("APP_URL")
            or "http://localhost:3000"
        ),
        public_api_url=env.get("PUBLIC_API_URL"),
        db_pool_size=int(env.get("DB_POOL_SIZE", "20")),
        db_pool_timeout=float(env.get("DB_POOL_TIMEOUT", "2")),
        ratelimit_backend=env.get("RATELIMIT_BACKEND", "memory").lower(),
        ratelimit_max=int(env.get("RATELIMIT_MAX", "100")),
        ratelimit_window_seconds=int(
            env.get("RATELIMIT_WINDOW_SECONDS", str(15 * 60))
        ),
        redis_url=env.get("REDIS_URL", "redis://127.0.0.1:6379"),
        upload_dir=env.get("UPLOAD_DIR", "uploads"),
        seed_defaults=_flag(env.get("SEED_DEFAULTS"), True),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
        log_dir=env.get("LOG_DIR") or None,
    )
