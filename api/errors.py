"""
Application errors and their HTTP status codes.

Resource and auth code raise these; the handlers registered in api.api turn
them into JSON error responses.
"""
from typing import Any, List, Union


class JoblyError(Exception):
    """Base error carrying the HTTP status it should be reported with."""
    status_code = 500

    def __init__(self, message: Union[str, List[Any]] = "Internal Server Error"):
        super().__init__(message)
        self.message = message


class BadRequestError(JoblyError):
    """400: malformed input or a duplicate record."""
    status_code = 400

    def __init__(self, message: Union[str, List[Any]] = "Bad Request"):
        super().__init__(message)


class UnauthorizedError(JoblyError):
    """401: no valid credentials."""
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ForbiddenError(JoblyError):
    """403: authenticated but not allowed."""
    status_code = 403

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message)


class NotFoundError(JoblyError):
    """404: no rows matched."""
    status_code = 404

    def __init__(self, message: str = "Not Found"):
        super().__init__(message)


class ConflictError(JoblyError):
    """409: the store rejected a write because of a uniqueness constraint."""
    status_code = 409

    def __init__(self, message: str = "Conflict"):
        super().__init__(message)
