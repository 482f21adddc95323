import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class Settings:
    jwt_secret: str = ""
    google_ai_api_key: str = ""
    host: str = "0.0.0.0"
    port: int = 8080
    jwt_audience: Optional[str] = None
    fetch_timeout: float = 30.0
    read_timeout: int = 10
    shutdown_timeout: int = 30
    log_level: str = "INFO"
    allowed_origins: Tuple[str, ...] = ()


def load_settings(environ: Mapping[str, str] = os.environ) -> Settings:
    """Read the service configuration from the environment.

    Called once at startup; the returned value is never mutated.
    """
    origins = environ.get("ALLOWED_ORIGINS", "")
    return Settings(
        jwt_secret=environ.get("SUPABASE_JWT_SECRET", ""),
        google_ai_api_key=environ.get("GOOGLE_AI_APIKEY", ""),
        host=environ.get("HOST", "0.0.0.0"),
        port=int(environ.get("PORT", "8080")),
        jwt_audience=environ.get("JWT_AUDIENCE") or None,
        fetch_timeout=float(environ.get("FETCH_TIMEOUT", "30")),
        read_timeout=int(environ.get("READ_TIMEOUT", "10")),
        shutdown_timeout=int(environ.get("SHUTDOWN_TIMEOUT", "30")),
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
        allowed_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
    )
