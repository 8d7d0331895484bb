"""
Sweep Expired Sessions Use Case

Deactivates sessions whose refresh window has passed. Triggered by an
external scheduler.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from identity_service.app.services.errors import storage_error
from identity_service.app.services.unit_of_work import UnitOfWork
from identity_service.domain.base import utcnow
from identity_service.libs.result import Result, Return
from .dtos import SweepResult

logger = logging.getLogger(__name__)


class SweepExpiredSessionsUseCase:
    def __init__(self, uow: UnitOfWork):
        self.uow = uow

    async def execute(self) -> Result[SweepResult]:
        try:
            async with self.uow:
                count = await self.uow.sessions.deactivate_expired(utcnow())
                await self.uow.commit()
        except SQLAlchemyError as exc:
            return Return.err(storage_error(exc, "Unable to sweep expired sessions"))

        logger.info(f"Deactivated {count} expired session(s)")
        return Return.ok(SweepResult(deactivated_count=count))
