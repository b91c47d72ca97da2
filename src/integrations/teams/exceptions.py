"""Exceptions raised by the Teams integration."""


class TeamsError(Exception):
    """Base exception for Teams directory errors."""

    def __init__(self, message: str, error_code: str | None = None):
        """
        Initialize Teams error.

        Args:
            message: Error message
            error_code: Optional error code (e.g., "SCRIPT_FAILED", "TIMEOUT")
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class TeamsScriptError(TeamsError):
    """A PowerShell script exited non-zero or could not be started."""

    def __init__(self, message: str, exit_code: int | None = None, stderr: str = ""):
        super().__init__(message, "SCRIPT_FAILED")
        self.exit_code = exit_code
        self.stderr = stderr


class TeamsScriptTimeoutError(TeamsError):
    def __init__(self, timeout_seconds: float):
        super().__init__(
            f"PowerShell script timed out after {timeout_seconds:g}s", "TIMEOUT"
        )
        self.timeout_seconds = timeout_seconds


class TeamsResponseError(TeamsError):
    """Script output could not be parsed."""

    def __init__(self, message: str):
        super().__init__(message, "INVALID_RESPONSE")
