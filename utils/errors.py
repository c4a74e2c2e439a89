"""
Error taxonomy for ClubPass.

Every error carries the HTTP status and the message a caller is allowed to
see. Route handlers turn these into JSON responses; anything else becomes a
generic 500.
"""


class ClubPassError(Exception):
    status_code = 500
    public_message = "Internal Server Error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        if message:
            self.public_message = message


class ValidationError(ClubPassError):
    """Missing or malformed request fields."""
    status_code = 400
    public_message = "Missing required fields"


class VerificationFailure(ClubPassError):
    """
    Claim could not be matched against the club roster.

    Unknown club, missing roster, storage outage and hash mismatch all raise
    this same error with the same message.
    """
    status_code = 403
    public_message = "Verification failed. Invalid Name or Card Number."

    def __init__(self):
        super().__init__()


class ConfigurationError(ClubPassError):
    """Credentials for the mandatory platform are missing."""
    status_code = 500


class UpstreamError(ClubPassError):
    """A wallet platform or storage call failed unexpectedly."""
    status_code = 502


class UnsupportedOperation(ClubPassError):
    status_code = 405
