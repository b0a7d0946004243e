"""Post-related exceptions."""

from src.shared.errors import AppException, ErrorKind


class PostNotFound(AppException):
    """Raised when a post does not exist or does not belong to the caller."""

    kind = ErrorKind.NOT_FOUND

    def __init__(self, post_id: int):
        super().__init__(detail=f"Post {post_id} not found")
        self.post_id = post_id
