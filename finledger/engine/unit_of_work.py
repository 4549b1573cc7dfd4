"""Atomic unit of work over one SQLAlchemy session"""

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.orm import Session

_DEPTH_KEY = "finledger_uow_depth"


@contextmanager
def unit_of_work(db: Session) -> Iterator[Session]:
    """
    Commit everything done inside the block, or nothing.

    Blocks nest: only the outermost one commits or rolls back, so an engine
    call made from inside another engine call joins the caller's transaction.

    Usage:
        with unit_of_work(db):
            expense = ...
            ledger.apply(...)        # nested unit, no commit of its own
            progress.apply_payment(expense)
    """
    depth = db.info.get(_DEPTH_KEY, 0)
    db.info[_DEPTH_KEY] = depth + 1
    try:
        yield db
        if depth == 0:
            db.commit()
    except Exception:
        if depth == 0:
            db.rollback()
        raise
    finally:
        db.info[_DEPTH_KEY] = depth
