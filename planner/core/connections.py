"""
Named connection registry.

The record store never reaches for a global engine. It is handed a
``ConnectionRegistry`` and a logical connection name at construction, and
resolves the engine by that name at the start of every operation.

Usage:
    registry = ConnectionRegistry()
    registry.register("sqlite:roadmap.db", db.engine)

    with registry.session("sqlite:roadmap.db") as session:     # read
        ...
    with registry.begin("sqlite:roadmap.db") as session:       # write, commits on exit
        ...
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from planner.core.exceptions import ConnectionNotFoundError

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Maps logical connection names to engines and session factories."""

    def __init__(self) -> None:
        self._engines: dict[str, Engine] = {}
        self._factories: dict[str, sessionmaker] = {}

    def register(self, name: str, engine: Engine) -> None:
        """Bind ``name`` to ``engine``, replacing any previous binding."""
        self._engines[name] = engine
        self._factories[name] = sessionmaker(bind=engine, expire_on_commit=False)
        logger.debug("Connection registered name=%s url=%s", name, engine.url.render_as_string())

    def unregister(self, name: str) -> None:
        self._engines.pop(name, None)
        self._factories.pop(name, None)

    def names(self) -> list[str]:
        return sorted(self._engines)

    def __contains__(self, name: object) -> bool:
        return name in self._engines

    def engine(self, name: str) -> Engine:
        """Return the engine registered under ``name``.

        Raises:
            ConnectionNotFoundError: If nothing is registered under ``name``.
        """
        try:
            return self._engines[name]
        except KeyError:
            raise ConnectionNotFoundError(name) from None

    def _factory(self, name: str) -> sessionmaker:
        try:
            return self._factories[name]
        except KeyError:
            raise ConnectionNotFoundError(name) from None

    @contextmanager
    def session(self, name: str) -> Iterator[Session]:
        """Yield a short-lived session for reads; closed on exit."""
        factory = self._factory(name)
        with factory() as session:
            yield session

    @contextmanager
    def begin(self, name: str) -> Iterator[Session]:
        """Yield a session inside a transaction; commit on success, roll back on error."""
        factory = self._factory(name)
        with factory.begin() as session:
            yield session
