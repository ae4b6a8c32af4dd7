"""Core utility functions."""

from urllib.parse import urlparse

_SYNC_DRIVERS = {
    "+asyncpg": "+psycopg",
    "+aiosqlite": "",
}


def convert_async_db_url_to_sync(database_url: str) -> str:
    """
    Convert an async database URL to a sync database URL.

    Converts postgresql+asyncpg:// to postgresql+psycopg:// (psycopg3) and
    sqlite+aiosqlite:// to sqlite:// for synchronous tools such as Alembic.
    Only the scheme is rewritten; SQLite paths without a netloc are preserved.

    Args:
        database_url: The async database URL (e.g., postgresql+asyncpg://...)

    Returns:
        The sync database URL (e.g., postgresql+psycopg://...)
    """
    scheme = urlparse(database_url).scheme
    for async_driver, sync_driver in _SYNC_DRIVERS.items():
        if async_driver in scheme:
            sync_scheme = scheme.replace(async_driver, sync_driver)
            return sync_scheme + database_url[len(scheme) :]
    return database_url
