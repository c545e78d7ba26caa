"""Custom application-wide exceptions."""


class ApplicationError(Exception):
    """Base class for application-specific errors."""

    def __init__(
        self, message: str = "An application error occurred", original_exception: Exception | None = None
    ) -> None:
        super().__init__(message)
        self.original_exception = original_exception
        self.message = message

    def __str__(self) -> str:
        if self.original_exception:
            return f"{self.message} (Original error: {self.original_exception})"
        return self.message


class AuthenticationError(ApplicationError):
    """Exception raised when a webhook signature cannot be verified."""

    def __init__(self, message: str = "Invalid webhook signature") -> None:
        super().__init__(message)


class ValidationError(ApplicationError):
    """Exception raised for malformed requests, payloads or invalid field values."""

    def __init__(
        self,
        message: str = "Validation failed",
        field: str | None = None,
        index: int | None = None,
        original_exception: Exception | None = None,
    ) -> None:
        super().__init__(message, original_exception)
        self.field = field
        self.index = index


class PayloadParseError(ValidationError):
    """Exception raised when a webhook body is not valid JSON."""

    def __init__(self, message: str = "Invalid JSON in webhook body", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception=original_exception)


class PersistenceError(ApplicationError):
    """Exception raised for errors during inventory store operations."""

    def __init__(self, message: str = "Persistence operation failed", original_exception: Exception | None = None) -> None:
        super().__init__(message, original_exception)
        self.message = f"Persistence Error: {message}"
