import os
from dataclasses import dataclass

try:
    from dotenv import load_dotenv  # type: ignore

    load_dotenv()
except Exception:
    pass


@dataclass(frozen=True)
class SupabaseEnv:
    url: str | None
    publishable_key: str | None
    secret_key: str | None

    @property
    def key(self) -> str | None:
        # Prefer SERVICE ROLE key for server-side writes
        return self.secret_key or self.publishable_key


def load_supabase_env() -> SupabaseEnv:
    url = (os.getenv("SUPABASE_URL") or os.getenv("SUPABASE_PROJECT_URL") or "").strip() or None

    publishable_key = (os.getenv("SUPABASE_ANON_KEY") or "").strip() or None
    secret_key = (os.getenv("SUPABASE_SERVICE_ROLE_KEY") or "").strip() or None

    return SupabaseEnv(url=url, publishable_key=publishable_key, secret_key=secret_key)
