class AppError(Exception):
    """Base error for failures that are reported to API clients."""

    status_code = 500
    code = "SERVICE_FAILURE"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AlreadyExists(AppError):
    status_code = 409
    code = "ALREADY_EXISTS"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"


class ServiceFailure(AppError):
    """An identity, store or generation call failed."""

    status_code = 502
    code = "SERVICE_FAILURE"


class Unauthenticated(AppError):
    status_code = 401
    code = "UNAUTHENTICATED"
