"""
Classification of database integrity failures.
"""

from sqlalchemy.exc import IntegrityError

# SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"


def is_unique_violation(error: IntegrityError) -> bool:
    """True when the failure is a unique index or constraint, not NOT NULL or FK."""
    orig = error.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is not None:
        return code == UNIQUE_VIOLATION
    # sqlite3 reports "UNIQUE constraint failed: <table>.<column>"
    return "unique constraint" in str(orig).lower()
