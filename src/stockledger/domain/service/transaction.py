"""Transaction boundary for domain service methods."""

from __future__ import annotations

import functools
import logging

from stockledger.domain.exceptions import ConcurrencyConflict

logger = logging.getLogger(__name__)


def transactional(method):
    """Run a service method inside ``self._uow``.

    If a transaction is already open (the method was called by another
    service method) the call joins it. Otherwise a new transaction is
    opened, and a ConcurrencyConflict restarts the whole method from
    scratch, up to ``uow.max_attempts`` times in total.
    """

    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        uow = self._uow
        if uow.in_transaction:
            return method(self, *args, **kwargs)

        attempt = 1
        while True:
            try:
                with uow:
                    return method(self, *args, **kwargs)
            except ConcurrencyConflict:
                if attempt >= uow.max_attempts:
                    logger.error(
                        "Giving up on %s after %d conflicting attempts",
                        method.__qualname__, attempt,
                    )
                    raise
                logger.warning(
                    "Concurrent write during %s, retrying (attempt %d of %d)",
                    method.__qualname__, attempt + 1, uow.max_attempts,
                )
                attempt += 1

    return wrapper
