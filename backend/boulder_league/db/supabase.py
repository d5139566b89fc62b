from functools import lru_cache

from boulder_league.core.config import settings
from supabase import Client, ClientOptions, create_client


@lru_cache(maxsize=1)
def get_supabase_client() -> Client:
    """
    Get a Supabase client bound to the configured league schema.

    Raises:
        ValueError: If SUPABASE_URL or SUPABASE_KEY is not set
    """
    if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
        raise ValueError(
            "SUPABASE_URL and SUPABASE_KEY environment variables must be set. "
            "Create a .env file in the backend directory or set them in your environment."
        )

    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_KEY,
        options=ClientOptions(schema=settings.SUPABASE_SCHEMA),
    )
