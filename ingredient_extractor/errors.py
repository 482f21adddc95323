from typing import Optional


class ServiceError(Exception):
    """Base for every failure that ends a request. Carries the HTTP status to answer with."""

    status_code = 500
    detail = "Internal Server Error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class AuthError(ServiceError):
    status_code = 401
    detail = "Unauthorized"


class DecodeError(ServiceError):
    status_code = 400
    detail = "Bad Request"


class FetchError(ServiceError):
    """The recipe page could not be retrieved."""


class HTTPStatusError(FetchError):
    """The recipe page answered with a non-2xx status."""

    def __init__(self, url: str, response_status: int):
        super().__init__(f"{url} answered with status {response_status}")
        self.url = url
        self.response_status = response_status


class ExtractionError(ServiceError):
    """The generative model could not produce an ingredient list."""


class UploadError(ExtractionError):
    pass


class CompletionError(ExtractionError):
    pass
