"""Custom exception classes for the ConnectWise API client."""

from typing import Any


class ConnectWiseError(Exception):
    """Base exception for all ConnectWise API errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: Any = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data

    def __str__(self) -> str:
        if self.status_code:
            return f"ConnectWise API Error ({self.status_code}): {self.message}"
        return f"ConnectWise API Error: {self.message}"


class ConnectWiseAuthenticationError(ConnectWiseError):
    """Exception raised for authentication errors (401/403)."""

    def __init__(
        self,
        message: str = "Invalid API keys or client ID",
        status_code: int = 401,
        response_data: Any = None,
    ) -> None:
        super().__init__(message, status_code, response_data)


class ConnectWiseNotFoundError(ConnectWiseError):
    def __init__(self, message: str = "Resource not found", response_data: Any = None):
        super().__init__(message, 404, response_data)


class ConnectWiseBadRequestError(ConnectWiseError):
    def __init__(self, message: str = "Bad request", response_data: Any = None):
        super().__init__(message, 400, response_data)


class ConnectWiseServerError(ConnectWiseError):
    def __init__(self, message: str = "Internal server error occurred", status_code: int = 500):
        super().__init__(message, status_code)


class ConnectWiseTimeoutError(ConnectWiseError):
    def __init__(self, message: str = "Request timed out"):
        super().__init__(message)
