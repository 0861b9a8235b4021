from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session


@contextmanager
def savepoint(session: Session) -> Iterator:
    """
    Run one unit of work inside a SAVEPOINT (begin_nested).
    On error only that unit is rolled back and the exception is re-raised,
    leaving the enclosing transaction usable for the rest of the batch.
    Usage:
        for record in batch:
            try:
                with savepoint(db):
                    ... DB work ...
            except SQLAlchemyError:
                errors += 1
    """
    with session.begin_nested():
        yield
