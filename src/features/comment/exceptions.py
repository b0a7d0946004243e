"""Comment-related exceptions."""

from src.shared.errors import AppException, ErrorKind


class CommentNotFound(AppException):
    """Raised when a comment does not exist or does not belong to the caller."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, comment_id: int):
        super().__init__(detail=f"Comment {comment_id} not found")
