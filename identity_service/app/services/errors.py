import logging

from sqlalchemy.exc import SQLAlchemyError, TimeoutError as PoolTimeoutError

from identity_service.domain.entities import ErrorCode
from identity_service.libs.result import Error

logger = logging.getLogger(__name__)


def storage_error(exc: SQLAlchemyError, message: str) -> Error:
    """
    Convert a storage fault into a caller-safe Error.

    Connection pool timeouts are transient (SERVICE_UNAVAILABLE); anything
    else is INTERNAL_ERROR. Driver details are logged, never returned.
    """
    if isinstance(exc, PoolTimeoutError):
        logger.warning(f"{message}: connection pool timeout")
        return Error(ErrorCode.SERVICE_UNAVAILABLE, "Service temporarily unavailable")
    logger.error(f"{message}: {type(exc).__name__}")
    return Error(ErrorCode.INTERNAL_ERROR, message)
