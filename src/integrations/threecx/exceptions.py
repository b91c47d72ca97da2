"""Exceptions raised by the 3CX client."""


class ThreeCXError(Exception):
    """Base exception for 3CX API errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ThreeCXAuthenticationError(ThreeCXError):
    def __init__(self, message: str = "Invalid 3CX username or password"):
        super().__init__(message, 401)


class ThreeCXMfaRequiredError(ThreeCXError):
    def __init__(self, message: str = "3CX requires a security code for this account"):
        super().__init__(message)
