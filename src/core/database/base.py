from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# BigInteger for PostgreSQL, Integer for SQLite (required for autoincrement)
BigIntPK = BigInteger().with_variant(Integer, "sqlite")

# Cedi amounts, stored to the pesewa
MoneyAmount = Numeric(15, 2)

# Percentages such as SSNIT and PAYE rates, 0-100
Percent = Numeric(5, 2)


class Base(DeclarativeBase):
    """Declarative base shared by every school table."""


class BaseModel(Base):
    """
    Surrogate id plus created_at / updated_at.

    Payments and school classes derive from Base directly and declare
    their own columns.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(BigIntPK, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
