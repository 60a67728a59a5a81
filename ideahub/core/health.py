"""Liveness and readiness checks."""

import logging
from datetime import datetime, timezone

from .models import HealthReport
from .ports import IdeaStorePort

logger = logging.getLogger(__name__)


class HealthService:
    """Reports whether the process is alive and ready to serve requests."""

    def __init__(self, store: IdeaStorePort):
        self.store = store

    def liveness(self) -> HealthReport:
        return HealthReport(
            name="liveness",
            healthy=True,
            checked_at=datetime.now(timezone.utc),
        )

    async def readiness(self) -> HealthReport:
        """Ready when the store answers a ping."""
        now = datetime.now(timezone.utc)
        try:
            reachable = await self.store.ping()
        except Exception as e:
            logger.error(f"Readiness check failed: {e}", exc_info=True)
            return HealthReport(
                name="readiness",
                healthy=False,
                detail=f"Database is not accessible: {e}",
                checked_at=now,
            )

        if not reachable:
            return HealthReport(
                name="readiness",
                healthy=False,
                detail="Database is not accessible",
                checked_at=now,
            )
        return HealthReport(name="readiness", healthy=True, checked_at=now)
