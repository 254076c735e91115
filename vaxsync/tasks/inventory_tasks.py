"""
Celery tasks for the inventory ledger.
The reserved counter is derived data; a periodic sweep repairs any drift.
"""

import asyncio
import logging

from vaxsync.tasks.celery_app import celery_app

logger = logging.getLogger(__name__)


@celery_app.task(name="inventory.reconcile_reserved")
def reconcile_reserved_task():
    """Recalculate reserved doses for every (barangay, vaccine) pair."""

    async def _reconcile():
        from vaxsync.database import async_session_factory
        from vaxsync.services.ledger_service import reconcile_all_reserved

        async with async_session_factory() as db:
            return await reconcile_all_reserved(db)

    return asyncio.run(_reconcile())


@celery_app.task(name="inventory.recalculate_reserved")
def recalculate_reserved_task(barangay_id: str, vaccine_id: str):
    """Recalculate reserved doses for one pair."""
    from uuid import UUID

    async def _recalculate():
        from vaxsync.database import async_session_factory
        from vaxsync.services.ledger_service import recalculate_reserved

        async with async_session_factory() as db:
            reserved = await recalculate_reserved(db, UUID(barangay_id), UUID(vaccine_id))
            logger.info(
                f"Barangay {barangay_id} vaccine {vaccine_id}: reserved = {reserved}"
            )
            return {
                "barangay_id": barangay_id,
                "vaccine_id": vaccine_id,
                "quantity_reserved": reserved,
            }

    return asyncio.run(_recalculate())
