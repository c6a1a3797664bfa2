class ScoreException(Exception):
    """Base exception for score-related errors."""
    pass


class ScoreValidationError(ScoreException):
    """Raised when a submitted score has a bad shape or range."""
    pass


class SubmissionLimitExceeded(ScoreException):
    """Raised when an origin submits too many scores in the trailing hour."""
    pass


class ScoreClearDisabled(ScoreException):
    """Raised when bulk deletion of scores is not enabled."""
    pass
