# storefront/storage.py
"""Storage adapter: runs parameterized statements against the configured SQL store.

The adapter sits on top of the Flask-SQLAlchemy session, so the same code
talks to the embedded SQLite file, a remote PostgreSQL/MySQL server or a
managed SQL service, whichever ``SQLALCHEMY_DATABASE_URI`` points at.

Outside ``transaction()`` every statement is committed on its own. Inside it,
statements accumulate and are committed (or rolled back) together.
"""
from __future__ import annotations

from contextlib import contextmanager, nullcontext
from dataclasses import dataclass, field

from flask import current_app, g
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from storefront.errors import StorageError

# raised by the DB-API driver itself for parameters it cannot bind
_DRIVER_ERRORS = (SQLAlchemyError, OverflowError)


def _storage_error(e: Exception) -> StorageError:
    return StorageError(str(e.orig if getattr(e, "orig", None) else e))


@dataclass
class StatementResult:
    rows: list[dict] = field(default_factory=list)
    rows_affected: int = 0
    last_insert_id: int | None = None

    def first(self) -> dict | None:
        return self.rows[0] if self.rows else None


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Storage:
    def __init__(self, db=None):
        self.db = db

    def init_app(self, app, db=None):
        if db is not None:
            self.db = db
        app.extensions["storage"] = self

    # ── lifecycle ────────────────────────────────────────────────────────────

    def open(self) -> None:
        """Prepare the engine for use; call once per app inside an app context."""
        engine: Engine = self.db.engine
        if engine.dialect.name == "sqlite" and not event.contains(
            engine, "connect", _enable_sqlite_foreign_keys
        ):
            event.listen(engine, "connect", _enable_sqlite_foreign_keys)
            # connections pooled before the listener existed never saw the pragma
            engine.dispose()
        try:
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError as e:
            raise StorageError(f"Cannot reach database: {e}") from e
        current_app.logger.info("[DB] storage opened (%s, transactions=%s)",
                                engine.dialect.name, self.supports_transactions)

    def close(self) -> None:
        self.db.session.remove()
        self.db.engine.dispose()
        current_app.logger.info("[DB] storage closed")

    @property
    def supports_transactions(self) -> bool:
        return bool(current_app.config.get("STORAGE_TRANSACTIONS", True))

    @property
    def session(self):
        return self.db.session

    @property
    def in_transaction(self) -> bool:
        return bool(g.get("_storage_tx"))

    # ── statements ───────────────────────────────────────────────────────────

    def execute(self, statement, params: dict | None = None) -> StatementResult:
        if isinstance(statement, str):
            statement = text(statement)
        try:
            result = self.session.execute(statement, params or {})
            if result.returns_rows:
                rows = [dict(r._mapping) for r in result]
                out = StatementResult(rows=rows, rows_affected=len(rows))
            else:
                out = StatementResult(rows_affected=result.rowcount,
                                      last_insert_id=getattr(result, "lastrowid", None))
            self._autocommit()
            return out
        except _DRIVER_ERRORS as e:
            self.session.rollback()
            raise _storage_error(e) from e

    def insert(self, obj) -> int:
        """Persist one mapped row and return its primary key."""
        try:
            self.session.add(obj)
            self.session.flush()
            new_id = obj.id
            self._autocommit()
            return new_id
        except _DRIVER_ERRORS as e:
            self.session.rollback()
            raise _storage_error(e) from e

    def _autocommit(self) -> None:
        if not self.in_transaction:
            self.session.commit()

    @contextmanager
    def transaction(self):
        if self.in_transaction:
            raise RuntimeError("nested storage transactions are not supported")
        g._storage_tx = True
        try:
            yield self
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise _storage_error(e) from e
        except Exception:
            self.session.rollback()
            raise
        finally:
            g._storage_tx = False

    def atomic(self):
        """A transaction where the store offers one, plain autocommit otherwise."""
        if self.supports_transactions:
            return self.transaction()
        return nullcontext(self)
