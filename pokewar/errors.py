"""Domain failures raised by the PokeWar services.

Every failure carries a human-readable message and the HTTP status the API
layer answers with. Services raise before mutating anything, so a caught
error means storage is unchanged.
"""


class PokeWarError(Exception):
    status_code = 400
    default_message = 'Request failed'

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self):
        return {'error': self.message}


class ValidationFailed(PokeWarError):
    status_code = 400
    default_message = 'Invalid request'

    def __init__(self, message=None, details=None):
        super().__init__(message)
        self.details = list(details or [])

    def to_dict(self):
        payload = super().to_dict()
        if self.details:
            payload['details'] = self.details
        return payload


class SelfRequest(ValidationFailed):
    default_message = 'You cannot send a request to yourself.'


class InvalidCredential(PokeWarError):
    status_code = 401
    default_message = 'The password you entered is incorrect.'


class Forbidden(PokeWarError):
    status_code = 403
    default_message = 'You are not allowed to do that.'


class NotFound(PokeWarError):
    status_code = 404
    default_message = 'Not found.'


class Conflict(PokeWarError):
    status_code = 409
    default_message = 'Conflict'


class DuplicateEmail(Conflict):
    default_message = 'That email already has an account.'


class AlreadyPending(Conflict):
    default_message = 'A request is already pending for this trainer.'


class AlreadyFriends(Conflict):
    default_message = 'You are already friends.'


class AlreadyResolved(Conflict):
    default_message = 'That request has already been answered.'


class AlreadyMember(Conflict):
    default_message = 'That trainer is already in this server.'


class ServerFull(Conflict):
    default_message = 'This server already has two members.'


class InsufficientSelections(Conflict):
    default_message = 'Two trainers must select a Pokemon first.'


class SameUser(Conflict):
    default_message = 'Both selections must be from different trainers.'


class SelectionsConsumed(Conflict):
    default_message = 'Those selections were already used for a match.'


class RosterUnavailable(PokeWarError):
    status_code = 502
    default_message = 'Unable to load the Pokemon roster right now.'
