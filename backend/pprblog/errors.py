"""Domain errors raised by services and translated to HTTP status codes by the API."""


class BlogError(Exception):
    """Base class for expected, caller-facing failures."""

    status_code = 500
    detail = "Internal server error"

    def __init__(self, detail: str | None = None):
        super().__init__(detail or self.detail)
        if detail:
            self.detail = detail


class DuplicateEmailError(BlogError):
    status_code = 409
    detail = "User with this email already exists"


class InvalidCredentialsError(BlogError):
    """Login failed. Deliberately silent about which half was wrong."""

    status_code = 401
    detail = "Invalid email or password"


class UnauthorizedError(BlogError):
    status_code = 401
    detail = "Not authenticated"


class ForbiddenError(BlogError):
    status_code = 403
    detail = "Admin access required"


class NotFoundError(BlogError):
    status_code = 404
    detail = "Not found"
