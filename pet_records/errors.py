class PetRecordsError(Exception):
    """Base error. ``code`` is the HTTP status the API answers with."""

    code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PetRecordsError):
    code = 400


class AuthError(PetRecordsError):
    code = 401


class NotFoundError(PetRecordsError):
    code = 404


class ConflictError(PetRecordsError):
    code = 409


class NetworkError(PetRecordsError):
    """The client could not reach any backend."""
    code = 503


class LoadError(PetRecordsError):
    """
    A client refresh failed. ``causes`` maps what was being loaded
    (e.g. "pets", "vaccines") to the error that stopped it.
    """

    def __init__(self, message: str, causes: dict[str, Exception] | None = None):
        super().__init__(message)
        self.causes = causes or {}


class NavigationError(PetRecordsError):
    pass


ERRORS_BY_STATUS = {
    400: ValidationError,
    401: AuthError,
    404: NotFoundError,
    409: ConflictError,
}
