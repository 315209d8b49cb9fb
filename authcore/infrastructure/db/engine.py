from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
import logging
from typing import Callable, Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)
from sqlalchemy.orm import DeclarativeBase

from authcore.domain.exceptions import StoreUnavailableError


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    pass


@lru_cache(maxsize=4)
def get_engine(dsn: str):
    return create_engine(dsn, future=True, pool_pre_ping=True)


def create_schema(engine) -> None:
    from authcore.infrastructure.db.models import accounts  # noqa: F401  registers tables

    Base.metadata.create_all(engine)


@contextmanager
def translate_db_errors(*, on_conflict: Callable[[], Exception] | None = None) -> Iterator[None]:
    """Map driver failures onto the domain's error channels.

    Constraint violations become ``on_conflict()`` when given; connectivity
    problems become ``StoreUnavailableError``. Anything else propagates as is.
    """
    try:
        yield
    except IntegrityError as exc:
        if on_conflict is None:
            raise
        raise on_conflict() from exc
    except (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError) as exc:
        logger.error("db: store_unavailable error=%s", exc.__class__.__name__)
        raise StoreUnavailableError("Persistence store is unavailable.") from exc
