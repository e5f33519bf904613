"""Rate limiting for API endpoints to prevent abuse."""

from collections import defaultdict
from datetime import UTC, datetime, timedelta
import threading
import time

from kural.core.config import settings


class RateLimiter:
    """
    Simple in-memory sliding-window rate limiter.

    For production behind several workers, consider using Redis for
    distributed rate limiting.
    """

    def __init__(self) -> None:
        self._attempts: dict[str, list] = defaultdict(list)
        self._lock = threading.Lock()

    def is_rate_limited(
        self, identifier: str, max_attempts: int, window_seconds: int
    ) -> tuple[bool, int | None]:
        """
        Check if an identifier is rate limited.

        Args:
            identifier: Unique identifier (e.g., client IP address)
            max_attempts: Maximum attempts allowed in the window
            window_seconds: Time window in seconds

        Returns:
            Tuple of (is_limited, retry_after_seconds)
        """
        with self._lock:
            now = datetime.now(UTC)
            cutoff = now - timedelta(seconds=window_seconds)

            # Remove old attempts
            recent = [
                timestamp
                for timestamp in self._attempts.get(identifier, [])
                if timestamp > cutoff
            ]
            if not recent:
                self._attempts.pop(identifier, None)
                return False, None
            self._attempts[identifier] = recent

            if len(recent) >= max_attempts:
                oldest_attempt = min(recent)
                retry_after = (
                    oldest_attempt + timedelta(seconds=window_seconds) - now
                ).total_seconds()
                return True, int(max(1, retry_after))

            return False, None

    def record_attempt(self, identifier: str) -> None:
        """Record an attempt for the given identifier."""
        with self._lock:
            self._attempts[identifier].append(datetime.now(UTC))

    def reset(self, identifier: str) -> None:
        """Forget every attempt recorded for an identifier."""
        with self._lock:
            if identifier in self._attempts:
                del self._attempts[identifier]

    def cleanup_old_entries(self, max_age_seconds: int = 3600) -> None:
        """
        Clean up old entries to prevent memory bloat.

        Args:
            max_age_seconds: Remove entries older than this
        """
        with self._lock:
            cutoff = datetime.now(UTC) - timedelta(seconds=max_age_seconds)
            identifiers_to_remove = []

            for identifier, attempts in self._attempts.items():
                self._attempts[identifier] = [
                    timestamp for timestamp in attempts if timestamp > cutoff
                ]
                if not self._attempts[identifier]:
                    identifiers_to_remove.append(identifier)

            for identifier in identifiers_to_remove:
                del self._attempts[identifier]


class ClientRateLimiter:
    """Per-IP request limiter applied to every API call."""

    def __init__(
        self, max_requests: int | None = None, window_seconds: int | None = None
    ) -> None:
        self.max_requests = max_requests or settings.RATE_LIMIT_MAX
        self.window_seconds = window_seconds or settings.RATE_LIMIT_WINDOW_SECONDS
        self.ip_limiter = RateLimiter()
        self._last_cleanup = time.monotonic()

    def check_request_allowed(self, ip_address: str) -> tuple[bool, int | None]:
        """
        Check and record a request from this IP.

        Returns:
            Tuple of (is_allowed, retry_after_seconds)
        """
        # Clients that stop calling are only dropped by a sweep
        if time.monotonic() - self._last_cleanup >= self.window_seconds:
            self.cleanup()

        limited, retry_after = self.ip_limiter.is_rate_limited(
            ip_address, self.max_requests, self.window_seconds
        )
        if limited:
            return False, retry_after

        self.ip_limiter.record_attempt(ip_address)
        return True, None

    def cleanup(self) -> None:
        """Clean up old entries."""
        self.ip_limiter.cleanup_old_entries(self.window_seconds)
        self._last_cleanup = time.monotonic()


# Global rate limiter instance
client_rate_limiter = ClientRateLimiter()
