"""Authentication exceptions."""

from src.shared.errors import AppException, ErrorKind


class AuthenticationException(AppException):
    """Base authentication exception: credential missing or wrong."""

    kind = ErrorKind.UNAUTHORIZED

    def __init__(self, detail: str = "Unauthorized"):
        super().__init__(detail=detail)


class MissingTokenException(AuthenticationException):
    """Raised when no bearer token accompanies the request."""

    def __init__(self):
        super().__init__(detail="Unauthorized")


class InvalidCredentialsException(AuthenticationException):
    """Raised when the password does not match."""

    def __init__(self):
        super().__init__(detail="Unauthorized")


class ForbiddenTokenException(AppException):
    """Base exception for tokens that are present but not acceptable."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, detail: str = "Invalid request"):
        super().__init__(detail=detail)


class InvalidTokenException(ForbiddenTokenException):
    """Raised when a token fails signature, expiry or claim verification.

    The verifier's message is passed through to the client.
    """

    def __init__(self, detail: str = "Invalid token"):
        super().__init__(detail=detail)


class TokenOwnerNotFoundException(ForbiddenTokenException):
    """Raised when a refresh token names a user that does not exist."""

    def __init__(self):
        super().__init__(detail="Invalid request")


class RefreshTokenReuseException(ForbiddenTokenException):
    """Raised when a refresh token that is no longer current is presented."""

    def __init__(self):
        super().__init__(detail="Invalid request")


class GoogleLoginException(AppException):
    """Raised when the Google authorization code cannot be turned into an identity."""

    kind = ErrorKind.BAD_REQUEST

    def __init__(self, detail: str = "Google Invalid request"):
        super().__init__(detail=detail)
