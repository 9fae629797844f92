"""
Custom error classes for Callboard.
Structured error handling with error codes across all modules.

Hierarchy:
    CallboardError
    ├── APIError
    │   └── ProviderUnavailableError
    │       ├── ProviderTimeoutError
    │       ├── ProviderNotConfiguredError
    │       └── CircuitOpenError
    └── DataError
        ├── ConfigError
        ├── AnalysisLookupError
        └── TenantResolutionError
"""


class CallboardError(Exception):
    """Base exception for all Callboard errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict = None):
        self.code = code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


# --- API Errors ---

class APIError(CallboardError):
    """Base class for external API errors."""

    def __init__(self, message: str, code: str = "API_ERROR",
                 status_code: int = None, url: str = None, **kwargs):
        self.status_code = status_code
        self.url = url
        details = {"status_code": status_code, "url": url, **kwargs}
        super().__init__(message, code=code, details=details)


class ProviderUnavailableError(APIError):
    """The call provider could not deliver call records. Fatal for a computation."""

    def __init__(self, message: str, code: str = "PROVIDER_UNAVAILABLE",
                 status_code: int = None, url: str = None, **kwargs):
        super().__init__(message, code=code, status_code=status_code, url=url, **kwargs)


class ProviderTimeoutError(ProviderUnavailableError):
    """Provider request timed out."""

    def __init__(self, url: str, timeout: float):
        super().__init__(
            f"Request timed out after {timeout}s: {url}",
            code="PROVIDER_TIMEOUT", url=url, timeout=timeout,
        )


class ProviderNotConfiguredError(ProviderUnavailableError):
    """Provider credentials are missing."""

    def __init__(self, service: str):
        super().__init__(
            f"{service} is not configured",
            code="PROVIDER_NOT_CONFIGURED", service=service,
        )


class CircuitOpenError(ProviderUnavailableError):
    """Circuit breaker is open — requests blocked."""

    def __init__(self, service: str, failures: int, reset_time: float):
        super().__init__(
            f"Circuit open for '{service}' after {failures} failures. "
            f"Resets in {reset_time:.0f}s.",
            code="CIRCUIT_OPEN", service=service,
        )


# --- Data Errors ---

class DataError(CallboardError):
    """Base class for data access errors."""
    pass


class ConfigError(DataError):
    """Missing or invalid configuration."""

    def __init__(self, message: str, setting: str = None):
        super().__init__(
            message, code="CONFIG_ERROR",
            details={"setting": setting},
        )


class AnalysisLookupError(DataError):
    """A batch lookup against the persisted call analysis failed."""

    def __init__(self, message: str, batch_size: int = None):
        super().__init__(
            message, code="ANALYSIS_LOOKUP_FAILED",
            details={"batch_size": batch_size},
        )


class TenantResolutionError(DataError):
    """The owning tenant of a user could not be resolved."""

    def __init__(self, message: str, user_id: str = None):
        super().__init__(
            message, code="TENANT_UNRESOLVED", details={"user_id": user_id},
        )
