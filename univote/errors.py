# univote/errors.py

# Domain error taxonomy. Every error carries the HTTP status the API boundary
# answers with; the message is safe to show to the caller.


class VotingSystemError(Exception):
    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message=None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(VotingSystemError):
    status_code = 400
    default_message = "Invalid request"


class Unauthorized(VotingSystemError):
    status_code = 401
    default_message = "Authentication required"


class Forbidden(VotingSystemError):
    status_code = 403
    default_message = "Access denied. Admin privileges required."


class NotFound(VotingSystemError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(VotingSystemError):
    status_code = 400
    default_message = "Resource already exists"


class VoteRejected(VotingSystemError):
    """Base class for the admission checks that refuse a ballot."""
    status_code = 400
    default_message = "Vote rejected"


class ElectionNotActive(VoteRejected):
    default_message = "This election is not active"


class ElectionEnded(VoteRejected):
    default_message = "This election has ended"


class AlreadyVoted(VoteRejected, Conflict):
    default_message = "You have already voted in this election"


class ConfigurationError(RuntimeError):
    pass
