from __future__ import annotations

import logging
import os
import random
import time

import httpx
from dotenv import load_dotenv
from supabase import Client, create_client

logger = logging.getLogger(__name__)

load_dotenv()  # loads .env if present

TRANSIENT_ERRORS = (
    httpx.RemoteProtocolError,
    httpx.ReadTimeout,
    httpx.ConnectError,
    httpx.WriteError,
)


def get_supabase() -> Client:
    url = os.getenv("SUPABASE_URL") or os.getenv("NEXT_PUBLIC_SUPABASE_URL")
    key = (
        os.getenv("SUPABASE_SERVICE_ROLE_KEY")
        or os.getenv("SUPABASE_SERVICE_KEY")
        or os.getenv("SUPABASE_ANON_KEY")
    )

    if not url or not key:
        raise RuntimeError(
            "Missing SUPABASE env vars. Need SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY (preferred)."
        )

    return create_client(url, key)


def execute_with_retry(rb, *, tries: int = 3, base_sleep: float = 0.25):
    """
    PostgREST calls can occasionally drop HTTP/2 connections under load.
    Wrap .execute() with retry + exponential backoff on transport errors only;
    API errors (bad filter, missing table, RLS) are raised immediately.
    """
    last = None
    for attempt in range(tries):
        try:
            return rb.execute()
        except TRANSIENT_ERRORS as e:
            last = e
            sleep = base_sleep * (2 ** attempt) + random.random() * 0.1
            logger.warning(
                "[supabase] transient http error: %s attempt=%d/%d sleep=%.2fs",
                type(e).__name__, attempt + 1, tries, sleep,
            )
            time.sleep(sleep)
    raise last  # type: ignore[misc]
