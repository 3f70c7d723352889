import os
from dataclasses import dataclass
from functools import lru_cache
from typing import List

try:
    from dotenv import load_dotenv  # type: ignore

    load_dotenv()
except Exception:
    pass


@dataclass(frozen=True)
class AppEnv:
    cors_origins: List[str]
    log_level: str
    clinics_table: str


@lru_cache(maxsize=1)
def load_app_env() -> AppEnv:
    origins = os.getenv("CORS_ORIGINS", "*")
    allowed = [o.strip() for o in origins.split(",") if o.strip()] or ["*"]

    return AppEnv(
        cors_origins=allowed,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        clinics_table=os.getenv("CLINICS_TABLE") or "clinics",
    )
