"""PostgreSQL rate store."""

from __future__ import annotations

from fx_ledger.db.relational_backend import UPSERT_SQL_ON_CONFLICT, RelationalBackend


class PostgresBackend(RelationalBackend):
    """Relational rate store for PostgreSQL engines (``INSERT ... ON CONFLICT``)."""

    def _upsert_sql(self) -> str:
        return UPSERT_SQL_ON_CONFLICT


__all__ = ["PostgresBackend"]
