class EventsError(Exception):
    status_code = 500
    retryable = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(EventsError):
    status_code = 400


class InvalidRange(ValidationError):
    pass


class InvalidTimezone(ValidationError):
    pass


class InvalidDateTime(ValidationError):
    pass


class NotFound(EventsError):
    status_code = 404


class PersistenceFailure(EventsError):
    """Storage layer error. Nothing was written; the caller may retry."""

    status_code = 500
    retryable = True
