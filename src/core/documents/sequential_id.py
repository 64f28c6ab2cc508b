import logging
import re
from collections.abc import Callable, Iterable
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import InstrumentedAttribute

from src.core.config import settings
from src.core.exceptions import AllocationConflictError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TRAILING_DIGITS = re.compile(r"(\d+)$")

# PostgreSQL serialization_failure / deadlock_detected
_RETRYABLE_SQLSTATES = {"40001", "40P01"}

# PostgreSQL unique_violation
_UNIQUE_VIOLATION = "23505"


def parse_sequence_suffix(identifier: str) -> int | None:
    """Trailing run of digits as an int, or None when there is none."""
    match = _TRAILING_DIGITS.search(identifier or "")
    if not match:
        return None
    return int(match.group(1))


def next_sequence_number(identifiers: Iterable[str]) -> int:
    """One past the largest parsable suffix; 1 when nothing parses."""
    suffixes = (parse_sequence_suffix(i) for i in identifiers)
    return max((s for s in suffixes if s is not None), default=0) + 1


def format_sequential_id(prefix: str, number: int, width: int | None = None) -> str:
    """
    Format ``prefix`` + zero-padded number.

    Examples:
        STU-0001
        24-T2-0042
        STU-10000 (numbers wider than the padding are not truncated)
    """
    width = width or settings.admission_id_width
    return f"{prefix}{number:0{width}d}"


def _is_conflict(exc: DBAPIError) -> bool:
    """
    Whether a failed commit lost a race and is worth retrying.

    Only unique violations count among integrity errors; NOT NULL and
    foreign key failures come from the record itself and propagate.
    """
    orig = getattr(exc, "orig", None)
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if isinstance(exc, IntegrityError):
        return sqlstate == _UNIQUE_VIOLATION or "unique" in str(orig or exc).lower()
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    message = str(orig or exc).lower()
    return "could not serialize" in message or "database is locked" in message


class SequentialIdAllocator:
    """
    Allocates human-readable sequential ids (PREFIX-0001, PREFIX-0002, ...).

    Each attempt runs in its own SERIALIZABLE transaction: scan the existing
    ids sharing the prefix, take max suffix + 1, and insert the new record in
    the same transaction. The id column must be UNIQUE so that two racing
    attempts that computed the same number cannot both commit; the loser is
    rolled back and retried with a fresh scan.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        width: int | None = None,
        max_attempts: int | None = None,
        isolation_level: str | None = "SERIALIZABLE",
    ):
        self.session_factory = session_factory
        self.width = width or settings.admission_id_width
        self.max_attempts = max_attempts or settings.admission_id_max_attempts
        self.isolation_level = isolation_level

    async def _existing_ids(
        self, session: AsyncSession, column: InstrumentedAttribute, prefix: str
    ) -> list[str]:
        result = await session.scalars(select(column).where(column.startswith(prefix, autoescape=True)))
        return list(result.all())

    async def allocate(
        self,
        prefix: str,
        column: InstrumentedAttribute,
        build_record: Callable[[str], T],
    ) -> T:
        """
        Allocate the next id for ``prefix`` and insert ``build_record(id)``.

        ``column`` is the unique id column of the record's table. Returns the
        committed record. Raises AllocationConflictError once every attempt
        has lost a race.
        """
        for attempt in range(1, self.max_attempts + 1):
            async with self.session_factory() as session:
                try:
                    async with session.begin():
                        if self.isolation_level:
                            await session.connection(
                                execution_options={"isolation_level": self.isolation_level}
                            )
                        existing = await self._existing_ids(session, column, prefix)
                        number = next_sequence_number(existing)
                        identifier = format_sequential_id(prefix, number, self.width)
                        record = build_record(identifier)
                        session.add(record)
                        await session.flush()
                    return record
                except DBAPIError as exc:
                    if not _is_conflict(exc):
                        raise
                    logger.warning(
                        "Id allocation for prefix %r conflicted (attempt %d/%d): %s",
                        prefix,
                        attempt,
                        self.max_attempts,
                        exc.__class__.__name__,
                    )

        logger.error("Id allocation for prefix %r gave up after %d attempts", prefix, self.max_attempts)
        raise AllocationConflictError(prefix, self.max_attempts)
