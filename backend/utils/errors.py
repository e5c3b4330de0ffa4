# backend/utils/errors.py
"""Domain errors raised by the service layer.

Routes do not catch these; the handler registered in main.py renders them as
``{"success": false, "error": ...}`` with the matching status code.
"""


class ServiceError(Exception):
    status_code = 500
    message = "Internal error"

    def __init__(self, message: str = None):
        super().__init__(message or self.message)
        if message:
            self.message = message


# Missing message / required field; nothing has been written
class InvalidInputError(ServiceError):
    status_code = 400
    message = "Invalid request"


class AuthError(ServiceError):
    status_code = 401
    message = "Unauthorized"


# Also used when the record exists but belongs to another user
class NotFoundError(ServiceError):
    status_code = 404
    message = "Not found"


# AI gateway failure of any kind. Carried in GatewayResult, never shown to end users.
class UpstreamUnavailable(ServiceError):
    status_code = 503
    message = "AI service unavailable"


# Store write failure after the reply was already computed
class PersistenceError(ServiceError):
    status_code = 500
    message = "Failed to save messages"


# Caller went away before the reply was ready; the gateway call was cancelled
class RequestCancelled(ServiceError):
    status_code = 499
    message = "Client closed request"
