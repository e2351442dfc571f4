"""MySQL rate store."""

from __future__ import annotations

from fx_ledger.db.relational_backend import UPSERT_SQL_MYSQL, RelationalBackend


class MySQLBackend(RelationalBackend):
    """Relational rate store for MySQL/MariaDB (``ON DUPLICATE KEY UPDATE``)."""

    def _upsert_sql(self) -> str:
        return UPSERT_SQL_MYSQL


__all__ = ["MySQLBackend"]
