"""Exceptions for the debate practice core"""


class PracticeError(Exception):
    """Base exception for debate practice errors"""
    pass


class ValidationError(PracticeError):
    """Raised when a required field is empty or malformed"""

    def __init__(self, message: str = "Invalid input", field: str = ""):
        super().__init__(message)
        self.field = field


class DuplicateAccountError(PracticeError):
    """Raised when signing up with an email that is already registered"""

    def __init__(self, message: str = "Email already in use"):
        super().__init__(message)


class InvalidCredentialError(PracticeError):
    """Raised when sign-in fails. Does not say whether the email exists."""

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class AuthenticationRequiredError(PracticeError):
    """Raised when an operation needs a signed-in account"""

    def __init__(self, message: str = "Not authenticated"):
        super().__init__(message)


class NotFoundError(PracticeError):
    """Raised when a Profile or Debate id does not exist"""

    def __init__(self, kind: str, record_id: str):
        super().__init__(f"{kind} not found: {record_id}")
        self.kind = kind
        self.record_id = record_id


class InvalidTransitionError(PracticeError):
    """Raised when an operation is not allowed in the current session state"""
    pass


class TurnInFlightError(PracticeError):
    """Raised when a turn is submitted while the previous reply is pending"""

    def __init__(self, message: str = "Waiting for the opponent's reply"):
        super().__init__(message)


class PersistenceError(PracticeError):
    """Base class for store failures"""
    pass


class CorruptDataError(PersistenceError):
    """Raised when a stored collection cannot be parsed"""

    def __init__(self, collection: str, reason: str = ""):
        message = f"Stored collection '{collection}' is corrupt"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.collection = collection


class StoreUnavailableError(PersistenceError):
    """Raised when the durable medium cannot be read or written"""
    pass
