from fastapi import status
from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error


class ClientError(Exception):
    def __init__(self, base_error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


class ServerError(Exception):
    def __init__(
        self, base_error: Error, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    ):
        self.base_error = base_error
        self.status_code = status_code
        super().__init__(base_error.message)


def server_error(base_error: Error) -> ServerError:
    """ServerError for a use case failure: 503 for transient storage faults, else 500"""
    if base_error.code == ErrorCode.SERVICE_UNAVAILABLE:
        return ServerError(base_error, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)
    return ServerError(base_error)
