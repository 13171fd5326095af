from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from signup import db
from signup.exceptions import PersistenceFailure


def commit(action: str, **context) -> None:
    """Commit the session, turning storage errors into ``PersistenceFailure``.

    Integrity races that callers want to handle themselves must be caught
    before reaching here.
    """
    try:
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        ctx = ' '.join(f"{k}={v}" for k, v in context.items())
        current_app.logger.error(f"[db-fail] action={action} {ctx} error={exc}")
        raise PersistenceFailure() from exc
