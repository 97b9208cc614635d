# yaytravel/client/errors.py

from typing import Optional


class ApiError(Exception):
    """A non-2xx answer from the backend."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotAuthenticatedError(ApiError):
    def __init__(self, message: str = "No access token found. Please log in."):
        super().__init__(message)


class SessionExpiredError(ApiError):
    def __init__(self, message: str = "Session expired. Please log in again."):
        super().__init__(message, status_code=401)
