"""Question store error taxonomy.

Route handlers never build error responses for these by hand; the exception
handlers registered in `onboarding_admin.http.problem` map them to statuses.
"""

from __future__ import annotations


class QuestionStoreError(Exception):
    status_code = 500
    title = "Error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(QuestionStoreError):
    """Missing required field or malformed payload."""

    status_code = 400
    title = "Bad Request"


class NotFoundError(QuestionStoreError):
    """No question with the requested id."""

    status_code = 404
    title = "Not Found"


__all__ = ["QuestionStoreError", "ValidationError", "NotFoundError"]
