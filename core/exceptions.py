"""
Custom exception hierarchy for OCAPI operations.

Exception Hierarchy:
    OCAPIError (base)
    ├── TokenAcquisitionError  - OAuth credential exchange failed
    └── OrderFetchError        - An order_search page request failed
        └── OCAPIDataError     - Invalid response structure

    ValidationError            - Input validation failed
"""


class OCAPIError(Exception):
    """Base exception for all OCAPI-related errors."""

    def __init__(self, message: str, details: str = None):
        self.message = message
        self.details = details
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message}: {self.details}"
        return self.message


class TokenAcquisitionError(OCAPIError):
    """
    The OAuth endpoint did not hand out a bearer token.

    Carries the environment name for diagnostics. Never retried.
    """

    def __init__(self, environment: str, details: str = None, status_code: int = None):
        super().__init__(
            f"Could not retrieve access token for {environment} environment",
            details,
        )
        self.environment = environment
        self.status_code = status_code


class OrderFetchError(OCAPIError):
    """
    An order search request failed.

    The whole fetch is aborted; records from earlier pages are discarded.
    """

    def __init__(
        self,
        message: str,
        details: str = None,
        status_code: int = None,
        start: int = None,
    ):
        super().__init__(message, details)
        self.status_code = status_code
        self.start = start


class OCAPIDataError(OrderFetchError):
    """
    API response has unexpected structure.

    This indicates a contract violation - the API returned
    data in a format we don't understand.
    """

    def __init__(self, message: str, details: str = None, expected: str = None, got: str = None):
        super().__init__(message, details)
        self.expected = expected
        self.got = got


class ValidationError(Exception):
    """
    Input validation failed.

    Used for validating user input before processing.
    """

    def __init__(self, field: str, message: str, value: any = None):
        self.field = field
        self.message = message
        self.value = value
        super().__init__(f"{field}: {message}")

    def __str__(self) -> str:
        if self.value is not None:
            return f"{self.field}: {self.message} (got: {self.value!r})"
        return f"{self.field}: {self.message}"
