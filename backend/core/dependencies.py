import hmac
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import get_database_manager


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency yielding an AsyncSession from the DatabaseManager."""
    manager = get_database_manager()
    async with manager.session() as session:
        yield session


def get_app_settings() -> Settings:
    """FastAPI dependency returning cached settings (overridable in tests)."""
    return get_settings()


def require_admin(
    x_admin_token: Optional[str] = Header(None),
    settings: Settings = Depends(get_app_settings),
) -> str:
    """Admin-only guard. Fails closed when ADMIN_TOKEN is unset."""
    expected = settings.admin_token
    if not expected or not x_admin_token or not hmac.compare_digest(x_admin_token, expected):
        raise HTTPException(status_code=401, detail={"code": "UNAUTHORIZED", "message": "Admin authorization required"})
    return "admin"
