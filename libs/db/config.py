from typing import Any

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from libs.common.config import Settings, get_settings


def build_engine(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database."""
    if settings.is_sqlite:
        # SQLite serialises writers itself; pooling options do not apply
        return create_async_engine(
            settings.DATABASE_URL,
            echo=False,
            future=True,
        )

    connect_args: dict[str, Any] = {
        # Row locks taken by order validation must never block indefinitely
        "options": f"-c lock_timeout={settings.DB_LOCK_TIMEOUT_MS}",
    }
    return create_async_engine(
        settings.DATABASE_URL,
        # echo=True for local dev to see SQL queries
        echo=(settings.ENVIRONMENT == "local"),
        future=True,
        pool_pre_ping=True,  # Test connections before using
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        pool_recycle=settings.DB_POOL_RECYCLE,
        connect_args=connect_args,
    )


engine = build_engine(get_settings())

# Create async session factory
AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)
