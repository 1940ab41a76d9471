from __future__ import annotations


class ProviderError(RuntimeError):
    """Base exception for provider-related failures."""


class ProviderRequestError(ProviderError):
    """HTTP/network/transport failures after the fetch client gave up retrying."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProviderRateLimited(ProviderRequestError):
    """Provider kept throttling the request (HTTP 429)."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=429)


class ProviderResponseError(ProviderError):
    """Provider returned a well-formed response describing an application-level error."""


class ProviderConfigError(ProviderError):
    """Provider cannot be used in this run (missing API key, missing base URL)."""


class ProviderCapabilityError(ProviderError):
    """Adapter does not support a requested operation."""
