from typing import Optional

from valkey.asyncio import Valkey

from interest_registry.config import settings


_client: Optional[Valkey] = None


def get_valkey_client() -> Valkey:
    """
    Get or create a Valkey client instance.
    Returns a singleton client to reuse connections.
    """
    global _client

    if _client is None:
        _client = Valkey(
            host=settings.valkey_host,
            port=settings.valkey_port,
            db=settings.valkey_db,
            password=settings.valkey_auth_token if settings.valkey_auth_token else None,
            ssl=True if settings.valkey_auth_token else False,
            decode_responses=False,
        )

    return _client


async def close_valkey_client():
    """
    Close the Valkey client connection.
    Should be called on application shutdown.
    """
    global _client

    if _client:
        await _client.aclose()
        _client = None
