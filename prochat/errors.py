"""
Error taxonomy shared by the stores, the authenticator and the routes.

Every error carries the HTTP status it maps to and a message that is safe to
hand to the client. Backend details stay in the logs.
"""


class ChatError(Exception):
    status_code = 500
    default_message = 'Server error'

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ChatError):
    status_code = 400
    default_message = 'Invalid input'


class InvalidCredentials(ChatError):
    status_code = 401
    default_message = 'Invalid credentials'


class Unauthenticated(ChatError):
    status_code = 401
    default_message = 'Unauthorized'


class Forbidden(ChatError):
    status_code = 403
    default_message = 'Forbidden'


class NotFound(ChatError):
    status_code = 404
    default_message = 'Receiver not found'


class DuplicateUsername(ChatError):
    status_code = 409
    default_message = 'Username already exists'


class StoreUnavailable(ChatError):
    status_code = 500
    default_message = 'Server error'
