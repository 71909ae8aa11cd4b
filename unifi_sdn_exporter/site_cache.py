"""
Time-to-live cache for the controller's site list.
"""

import threading
import time
from typing import Callable, Iterable, NamedTuple, Optional, Tuple

from .models.site import UnifiSite
from .logging import get_logger

logger = get_logger(__name__)

SITE_CACHE_TTL = 5 * 60


class _CacheState(NamedTuple):
    sites: Tuple[UnifiSite, ...]
    # clock() value after which the sites must be refreshed; None if never loaded
    expires: Optional[float]


class SiteCache:
    """
    Read-mostly cache of the sites known to one controller.

    The cached sites and their expiry are kept in one immutable state object
    that is replaced in a single assignment, so readers never lock and never
    observe a half-updated list. Refreshes are serialized by a lock and
    re-check freshness once they hold it; a reader racing a refresh may
    still trigger a second, redundant fetch.
    """

    def __init__(
        self,
        fetch: Callable[[], Iterable[UnifiSite]],
        ttl: float = SITE_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Args:
            fetch: Loads the full site list from the controller.
            ttl: Seconds a loaded site list stays fresh. Defaults to 5 minutes.
            clock: Monotonic time source, replaceable in tests.
        """
        self._fetch = fetch
        self.ttl = ttl
        self._clock = clock
        self._refresh_lock = threading.Lock()
        self._state = _CacheState(sites=(), expires=None)

    def _is_fresh(self, state: _CacheState) -> bool:
        return state.expires is not None and self._clock() < state.expires

    def get(self) -> Tuple[UnifiSite, ...]:
        """
        Return the cached sites, refreshing them first if they are stale.

        Raises:
            Whatever ``fetch`` raises; the previous state is kept in that case.
        """
        state = self._state
        if self._is_fresh(state):
            return state.sites

        with self._refresh_lock:
            state = self._state
            if not self._is_fresh(state):
                logger.debug("Site cache expired, refreshing")
                sites = tuple(self._fetch())
                state = _CacheState(sites=sites, expires=self._clock() + self.ttl)
                self._state = state
                logger.debug(f"Cached {len(sites)} sites for {self.ttl}s")
        return state.sites

    def invalidate(self) -> None:
        """Force the next read to refresh."""
        with self._refresh_lock:
            self._state = _CacheState(sites=self._state.sites, expires=None)
