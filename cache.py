"""
Time-to-live cache for the full country list.

One instance is handed to the REST client; tests pass their own instance with
a fake clock.
"""

import logging
import time

logger = logging.getLogger(__name__)

# One hour; the country list changes rarely
DEFAULT_TTL_SECONDS = 3600


class CountryCache:
    """
    Holds a single cached value with an expiry.

    Attributes:
        ttl_seconds (float or None): Lifetime of a stored value. None means
            the value never expires on its own.
    """

    def __init__(self, ttl_seconds=DEFAULT_TTL_SECONDS, clock=time.monotonic):
        """
        Args:
            ttl_seconds (float or None): Lifetime of a stored value.
            clock (callable): Returns the current time in seconds.
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._value = None
        self._stored_at = None
    # End of __init__

    def is_fresh(self):
        """Return True when a value is stored and has not expired."""
        if self._stored_at is None:
            return False
        if self.ttl_seconds is None:
            return True
        return self._clock() - self._stored_at < self.ttl_seconds
    # End of is_fresh

    def get(self):
        """Return the cached value, or None when empty or expired."""
        if not self.is_fresh():
            return None
        logger.debug("Country cache hit")
        return self._value
    # End of get

    def set(self, value):
        self._value = value
        self._stored_at = self._clock()
    # End of set

    def invalidate(self):
        """Drop the cached value so the next read goes to the network."""
        logger.info("Country cache invalidated")
        self._value = None
        self._stored_at = None
    # End of invalidate
# End of class CountryCache
