"""Database URL parsing for the rate store."""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from urllib.parse import ParseResult, parse_qsl, urlencode, urlparse, urlunparse

from fx_ledger.db import DEFAULT_SQLITE_DB_PATH

_MISSING_SCHEME = "Database URL must include a scheme (e.g. postgresql:// or sqlite:///)"

# Hosted MongoDB URIs sometimes carry the database as a query parameter, at
# times glued onto the previous value without a ``&``.
_DB_NAME_PARAM = "database_name"
_GLUED_DB_NAME = re.compile(r"(?i)(?<![?&])(database_name=)")


class DatabaseBackend(str, Enum):
    """Rate store engines a URL can point at."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRES = "postgres"
    MONGODB = "mongodb"

    @classmethod
    def resolve_backend_and_scheme(cls, scheme: str) -> tuple["DatabaseBackend", str]:
        """Map ``scheme`` to a backend and the scheme its driver expects.

        Postgres aliases collapse to ``postgresql``; the store runs on a sync
        engine so async drivers such as ``+asyncpg`` are dropped. Bare
        ``mysql``/``mariadb`` get the PyMySQL driver. MongoDB schemes pass
        through untouched so ``+srv`` keeps its DNS seedlist lookup.
        """

        if not scheme:
            raise ValueError(_MISSING_SCHEME)
        lowered = scheme.lower()
        family, _, driver = lowered.partition("+")
        backend = _SCHEME_FAMILIES.get(family)
        if backend is None:
            raise ValueError(
                f"Unsupported database backend {scheme!r}; "
                "use a sqlite, mysql, postgres or mongodb URL"
            )
        if backend is cls.POSTGRES:
            return backend, "postgresql"
        if backend is cls.SQLITE:
            return backend, "sqlite"
        if backend is cls.MYSQL and not driver:
            return backend, "mysql+pymysql"
        return backend, lowered

    @classmethod
    def from_scheme(cls, scheme: str) -> "DatabaseBackend":
        return cls.resolve_backend_and_scheme(scheme)[0]


_SCHEME_FAMILIES: dict[str, DatabaseBackend] = {
    "sqlite": DatabaseBackend.SQLITE,
    "postgres": DatabaseBackend.POSTGRES,
    "postgresql": DatabaseBackend.POSTGRES,
    "postgressql": DatabaseBackend.POSTGRES,
    "mysql": DatabaseBackend.MYSQL,
    "mariadb": DatabaseBackend.MYSQL,
    "mongodb": DatabaseBackend.MONGODB,
}


def _pop_database_name(url: str) -> tuple[ParseResult, str | None]:
    """Remove a ``DATABASE_NAME`` query parameter and move it into the path."""

    parsed = urlparse(_GLUED_DB_NAME.sub(r"&\1", url))
    kept: list[tuple[str, str]] = []
    name: str | None = None
    for key, value in parse_qsl(parsed.query, keep_blank_values=True):
        if key.lower() != _DB_NAME_PARAM:
            kept.append((key, value))
        elif value:
            name = value
    path = parsed.path
    if name and path in ("", "/"):
        path = f"/{name}"
    return parsed._replace(path=path, query=urlencode(kept, doseq=True)), name


@dataclass(slots=True)
class DatabaseConnectionInfo:
    """Where the rate store lives, with a URL its driver accepts."""

    backend: DatabaseBackend
    url: str
    name: str | None
    username: str | None = None
    password: str | None = None
    host: str | None = None
    port: int | None = None

    @classmethod
    def from_url(cls, url: str) -> "DatabaseConnectionInfo":
        """Parse ``url``; ``name`` is the database (or the SQLite file path)."""

        parsed, query_name = _pop_database_name(url)
        if not parsed.scheme:
            raise ValueError(_MISSING_SCHEME)
        backend, scheme = DatabaseBackend.resolve_backend_and_scheme(parsed.scheme)
        if backend is DatabaseBackend.SQLITE:
            # ``sqlite:////abs/file.db`` parses to path ``//abs/file.db``.
            file_name = parsed.path.removeprefix("/") or None
            return cls.sqlite(file_name) if file_name else cls(backend, "sqlite://", None)

        parsed = parsed._replace(scheme=scheme)
        return cls(
            backend=backend,
            url=urlunparse(parsed),
            name=parsed.path.removeprefix("/") or query_name,
            username=parsed.username,
            password=parsed.password,
            host=parsed.hostname,
            port=parsed.port,
        )

    @classmethod
    def sqlite(cls, db_path: str | Path = DEFAULT_SQLITE_DB_PATH) -> "DatabaseConnectionInfo":
        path = Path(db_path)
        return cls(DatabaseBackend.SQLITE, f"sqlite:///{path.as_posix()}", str(path))

    @property
    def is_sqlite(self) -> bool:
        return self.backend is DatabaseBackend.SQLITE

    @property
    def is_external(self) -> bool:
        return not self.is_sqlite


__all__ = ["DatabaseBackend", "DatabaseConnectionInfo"]
