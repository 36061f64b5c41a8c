from __future__ import annotations

from sqlalchemy.exc import SQLAlchemyError

# Postgres "undefined_table"; SQLite only reports it in the message.
UNDEFINED_TABLE_SQLSTATE = "42P01"
_MISSING_TABLE_PHRASES = ("no such table", "does not exist")


def is_missing_table_error(exc: SQLAlchemyError, table_name: str) -> bool:
    """Whether ``exc`` was raised because ``table_name`` has not been created.

    The materialized partnership table is filled by a separate refresh job
    and can be absent on a fresh database.
    """

    driver_error = getattr(exc, "orig", None)
    if driver_error is None:
        return False
    if getattr(driver_error, "sqlstate", None) == UNDEFINED_TABLE_SQLSTATE:
        return True

    message = str(driver_error).lower()
    return table_name.lower() in message and any(
        phrase in message for phrase in _MISSING_TABLE_PHRASES
    )
