"""Process-local store of in-progress checkout wizards, one per signed-in user.

Wizards live only in memory: a restart (or a new ``start``) begins again at
step 1. Entries are keyed by a digest of the bearer token so raw tokens are
not kept around.

A wizard untouched for ``ttl_seconds`` is dropped, and the store never holds
more than ``max_entries`` wizards (the least recently used goes first). The
store is not shared between processes, so the server runs a single worker.
"""

import hashlib
import threading
import time
from collections import OrderedDict
from typing import Callable

import structlog
from protean.exceptions import ValidationError

from ordering.checkout.checkout import CheckoutWizard

logger = structlog.get_logger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_MAX_ENTRIES = 10_000


def _key(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _no_checkout() -> ValidationError:
    return ValidationError({"checkout": ["No checkout in progress"]})


class WizardStore:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries
        self._clock = clock
        # key -> (last touched, wizard), least recently used first
        self._wizards: OrderedDict[str, tuple[float, CheckoutWizard]] = OrderedDict()
        self._lock = threading.Lock()

    def put(self, token: str, wizard: CheckoutWizard) -> None:
        with self._lock:
            self._store(_key(token), wizard)

    def get(self, token: str) -> CheckoutWizard:
        key = _key(token)
        with self._lock:
            self._evict_expired()
            entry = self._wizards.get(key)
            if entry is None:
                raise _no_checkout()
            self._store(key, entry[1])
            return entry[1]

    def claim(self, token: str) -> CheckoutWizard:
        """Take the wizard out of the store. Only one caller gets it."""
        with self._lock:
            self._evict_expired()
            entry = self._wizards.pop(_key(token), None)
        if entry is None:
            raise _no_checkout()
        return entry[1]

    def restore(self, token: str, wizard: CheckoutWizard) -> None:
        """Put a claimed wizard back unless a newer checkout has started."""
        key = _key(token)
        with self._lock:
            if key not in self._wizards:
                self._store(key, wizard)

    def clear(self) -> None:
        with self._lock:
            self._wizards.clear()

    def __len__(self) -> int:
        return len(self._wizards)

    def _store(self, key: str, wizard: CheckoutWizard) -> None:
        self._wizards[key] = (self._clock(), wizard)
        self._wizards.move_to_end(key)
        while len(self._wizards) > self.max_entries:
            self._wizards.popitem(last=False)
            logger.warning("checkout_evicted", reason="capacity")

    def _evict_expired(self) -> None:
        cutoff = self._clock() - self.ttl_seconds
        while self._wizards:
            key, (touched, _) = next(iter(self._wizards.items()))
            if touched > cutoff:
                break
            del self._wizards[key]
            logger.debug("checkout_evicted", reason="expired")


wizards = WizardStore()
