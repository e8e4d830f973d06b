# traffic/exceptions.py

class DashboardError(Exception):
    """Base exception for every failure surfaced to the dashboard."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ConfigurationError(DashboardError):
    """Raised when the API base URL is not configured."""
    pass


class TransportError(DashboardError):
    """Raised when the HTTP request itself fails (DNS, refused, timeout)."""
    pass


class ApiResponseError(DashboardError):
    """Raised for an `{"error": ...}` payload or a non-2xx status."""
    def __init__(self, message: str, status_code: int = None):
        self.status_code = status_code
        super().__init__(message)


class UnexpectedPayloadError(DashboardError):
    """Raised when a response body does not match any known shape."""
    def __init__(self, endpoint: str, detail: str = None):
        self.endpoint = endpoint
        message = f"Unexpected response from {endpoint}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
