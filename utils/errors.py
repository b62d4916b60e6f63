# utils/errors.py


class ScrumError(Exception):
    """Base class for every error surfaced to the user."""

    title = "Something went wrong"

    def __init__(self, message: str = ""):
        super().__init__(message or self.title)
        self.message = message or self.title


class PermissionDenied(ScrumError):
    title = "Permission denied"


class DuplicateInvitation(ScrumError):
    title = "Already invited"


class NotFound(ScrumError):
    title = "Not found"


class NotificationFailed(ScrumError):
    title = "Failed to send invitation"


class ValidationFailed(ScrumError):
    title = "Invalid input"


class InvalidTransition(ValidationFailed):
    title = "Invitation already answered"


class BackendUnavailable(ScrumError):
    title = "Backend unavailable"
