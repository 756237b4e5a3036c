"""
Error taxonomy for IdeaForge.

Every failure the core can report carries a machine-readable ``kind`` and
the HTTP status the API layer answers with. Messages are safe to show to
the caller; internal detail never goes into them.
"""


class IdeaForgeError(Exception):
    """Base class for all domain errors."""

    kind = 'InternalError'
    status_code = 500
    default_message = 'Internal server error'

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {'error': self.kind, 'message': self.message}


class ValidationError(IdeaForgeError):
    kind = 'ValidationError'
    status_code = 400
    default_message = 'Invalid request'


class InvalidTransition(ValidationError):
    """A state machine was asked for a transition it does not allow."""
    kind = 'InvalidTransition'
    default_message = 'Invalid state transition'


class SelfCollaboration(IdeaForgeError):
    kind = 'SelfCollaboration'
    status_code = 400
    default_message = 'You cannot collaborate on your own idea'


class InvalidCredentials(IdeaForgeError):
    kind = 'InvalidCredentials'
    status_code = 401
    default_message = 'Invalid email or password'


class InvalidToken(IdeaForgeError):
    kind = 'InvalidToken'
    status_code = 401
    default_message = 'Invalid token'


class ExpiredToken(IdeaForgeError):
    kind = 'ExpiredToken'
    status_code = 401
    default_message = 'Token has expired'


class Forbidden(IdeaForgeError):
    kind = 'Forbidden'
    status_code = 403
    default_message = 'Access denied'


class NotFound(IdeaForgeError):
    kind = 'NotFound'
    status_code = 404
    default_message = 'Not found'


class DuplicateIdentity(IdeaForgeError):
    kind = 'DuplicateIdentity'
    status_code = 409
    default_message = 'User already exists with this email'


class DuplicateRequest(IdeaForgeError):
    kind = 'DuplicateRequest'
    status_code = 409
    default_message = 'Collaboration request already exists'


class RateLimitExceeded(IdeaForgeError):
    kind = 'RateLimitExceeded'
    status_code = 429
    default_message = 'Rate limit exceeded. Please wait before trying again.'


class ExternalServiceFailure(IdeaForgeError):
    """The AI service did not answer usefully. Absorbed at the enrichment boundary."""
    kind = 'ExternalServiceFailure'
    status_code = 502
    default_message = 'AI service unavailable'
