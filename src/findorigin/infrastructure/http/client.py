"""HTTP client factory with sensible defaults."""

from httpx import AsyncClient, Limits, Timeout


class HTTPClientFactory:
    """Factory for creating HTTP clients with consistent configuration."""

    @staticmethod
    def create(timeout_seconds: float = 20.0) -> AsyncClient:
        """Create a new AsyncClient with sensible defaults.

        The caller owns the client and must ``aclose()`` it at shutdown.

        Args:
            timeout_seconds: Request timeout in seconds.

        Returns:
            Configured AsyncClient instance.
        """
        timeout = Timeout(timeout_seconds)
        limits = Limits(max_keepalive_connections=10, max_connections=50)
        return AsyncClient(timeout=timeout, limits=limits)
