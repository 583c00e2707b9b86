from typing import Optional


class PaymentsError(Exception):
    """Base class for errors that abort a replay."""


class MalformedInputError(PaymentsError):
    """Raised when the input log cannot be parsed."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class MissingAmountError(PaymentsError):
    """Raised when a deposit or withdrawal has no amount."""


class ClientMismatchError(PaymentsError):
    """Raised when a transaction reaches an account it does not belong to."""
