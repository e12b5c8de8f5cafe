import os
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()

TIMEZONE = os.getenv("TIMEZONE", "Europe/London")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def resolve_timezone(name: str) -> ZoneInfo:
    """IANA name -> ZoneInfo. A bad name is a config error, raised at startup."""
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise EnvironmentError(
            f"Invalid TIMEZONE {name!r}. Use an IANA name such as 'Europe/London'."
        ) from e


# Fail fast on a misconfigured TIMEZONE
TZ = resolve_timezone(TIMEZONE)


def require_supabase_env() -> None:
    """Fail fast if the store credentials are missing."""
    missing = []
    if not os.getenv("SUPABASE_URL"):
        missing.append("SUPABASE_URL")
    if not os.getenv("SUPABASE_SERVICE_ROLE_KEY"):
        missing.append("SUPABASE_SERVICE_ROLE_KEY")
    if missing:
        raise EnvironmentError(
            f"Missing required environment variables: {', '.join(missing)}. "
            "Copy .env.example to .env and fill in your Supabase credentials."
        )
