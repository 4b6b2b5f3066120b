"""
Gateway errors: raised by the auth gateway and stores,
converted to JSON responses by the handlers registered in app.py.
"""


class GatewayError(Exception):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message

    def to_dict(self):
        return {"success": False, "error": self.message}


class InvalidInput(GatewayError):
    status_code = 400
    message = "Missing required fields"


class Unauthorized(GatewayError):
    status_code = 401
    message = "Invalid credentials"


class Forbidden(GatewayError):
    status_code = 403
    message = "Access not authorized"


class NotFound(GatewayError):
    status_code = 404
    message = "Not found"


class Conflict(GatewayError):
    status_code = 409
    message = "Already exists"
