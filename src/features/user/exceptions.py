"""User-related exceptions."""

from src.shared.errors import AppException, ErrorKind


class UserException(AppException):
    """Base user exception."""

    def __init__(self, detail: str = "User operation failed", kind: ErrorKind = ErrorKind.BAD_REQUEST):
        super().__init__(detail=detail, kind=kind)


class UserNotFound(UserException):
    """Raised when user is not found."""

    def __init__(self):
        super().__init__(detail="User not found", kind=ErrorKind.NOT_FOUND)


class UsernameAlreadyExists(UserException):
    """Raised when trying to register a username that is taken."""

    def __init__(self):
        super().__init__(detail="User already exists", kind=ErrorKind.CONFLICT)


class CannotModifyOtherUser(UserException):
    """Raised when user tries to modify another user's profile."""

    def __init__(self):
        super().__init__(detail="You do not have permission to modify other users", kind=ErrorKind.FORBIDDEN)
