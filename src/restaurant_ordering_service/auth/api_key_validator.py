"""Admin API key validation.

Keys come from the ADMIN_API_KEY setting as a comma-separated list and are
compared in constant time.
"""

import hmac


class APIKeyValidator:
    """Checks X-API-Key values presented to the admin endpoints."""

    def __init__(self, api_keys: list[str]) -> None:
        """Initialize validator with the accepted admin keys.

        Args:
            api_keys: Accepted admin API keys

        Raises:
            ValueError: If no non-blank key is supplied
        """
        keys = [key.strip() for key in api_keys if key and key.strip()]
        if not keys:
            raise ValueError("At least one admin API key must be configured")

        self.api_keys = frozenset(keys)

    def validate(self, api_key: str) -> bool:
        """Return True when the key matches one of the configured admin keys."""
        candidate = api_key.encode()
        return any(hmac.compare_digest(candidate, key.encode()) for key in self.api_keys)
