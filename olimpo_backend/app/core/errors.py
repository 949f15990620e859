class OlimpoError(Exception):
    """Base class for errors the API maps onto HTTP responses."""

    status_code = 400

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ParseError(OlimpoError):
    """No usable course lines could be read from a transcript."""

    status_code = 422

    def __init__(self, detail: str, line_number: int | None = None):
        super().__init__(detail)
        self.line_number = line_number


class NotFoundError(OlimpoError):
    status_code = 404


class ValidationError(OlimpoError):
    status_code = 422


class ConflictError(OlimpoError):
    status_code = 409
