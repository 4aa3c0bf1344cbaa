"""
Database connection management.

Provides the async SQLAlchemy engine and session factory shared by the API
and the workers.

Dependencies: sqlalchemy, asyncpg, linkmeld.configs
System role: Database connection lifecycle management
"""

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from linkmeld.configs.database import DatabaseSettings


def get_async_engine(settings: DatabaseSettings | None = None) -> AsyncEngine:
    """
    Create async SQLAlchemy engine with connection pooling.

    pool_pre_ping=True verifies connections before use to detect stale
    connections early.

    Args:
        settings: Database settings (defaults to environment)

    Returns:
        AsyncEngine: Configured async engine
    """
    db_config = settings or DatabaseSettings()
    return create_async_engine(
        db_config.async_database_url,
        echo=db_config.echo_sql,
        pool_size=db_config.pool_size,
        max_overflow=db_config.max_overflow,
        pool_timeout=db_config.pool_timeout,
        pool_pre_ping=True,
    )


def get_async_session_factory(engine: AsyncEngine | None = None) -> async_sessionmaker:
    """
    Create async session factory for database operations.

    Args:
        engine: Engine to bind (a new one is created when omitted)

    Returns:
        async_sessionmaker: Session factory with manual transaction control
    """
    return async_sessionmaker(
        bind=engine or get_async_engine(),
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
