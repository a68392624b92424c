"""Shared plumbing for the store-backed services."""

import functools
import logging
from datetime import datetime
from typing import Callable

from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from capsule.errors import StoreUnavailableError
from capsule.utils.clock import utcnow

logger = logging.getLogger(__name__)


def store_operation(func):
    """Translate transport/persistence failures into StoreUnavailableError.

    The session is rolled back so the caller can keep using it. Nothing is
    retried here; retrying is the caller's decision.
    """

    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except OperationalError as e:
            self.session.rollback()
            logger.error("Store operation %s failed: %s", func.__qualname__, e)
            raise StoreUnavailableError(func.__name__, e) from e

    return wrapper


class StoreService:
    """Stateless service bound to a request-scoped session."""

    def __init__(self, session: Session, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.clock = clock

    def _execute(self, statement):
        """Run a core DML statement inside the session's transaction."""
        return self.session.connection().execute(statement)
