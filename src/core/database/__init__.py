from src.core.database.base import Base, BaseModel, BigIntPK, MoneyAmount, Percent
from src.core.database.session import async_session, engine, get_db, get_session_factory

__all__ = [
    "Base",
    "BaseModel",
    "BigIntPK",
    "MoneyAmount",
    "Percent",
    "async_session",
    "engine",
    "get_db",
    "get_session_factory",
]
