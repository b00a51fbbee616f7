class AttributionError(Exception):
    """Base class for recoverable campaign/attribution errors.

    ``status_code`` is the HTTP status the API layer answers with.
    """
    status_code = 400
    default_message = 'Attribution error'

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class NotFoundError(AttributionError):
    status_code = 404
    default_message = 'Not found'


class ConflictError(AttributionError):
    status_code = 409
    default_message = 'Conflict'


class InvalidHierarchyError(AttributionError):
    status_code = 400
    default_message = 'Invalid campaign hierarchy'


class ValidationError(AttributionError):
    status_code = 400
    default_message = 'Invalid input'
