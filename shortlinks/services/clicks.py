import logging

from ..crud import increment_link_clicks
from ..database import AsyncSessionLocal
from ..observability import CLICK_RECORD_FAILURES

logger = logging.getLogger(__name__)

async def record_click(link_id: int):
    """Count one visit for link_id. Never raises.

    Runs in its own session because it is scheduled after the redirect
    response has been sent and the request session is already closed.
    """
    try:
        async with AsyncSessionLocal() as db:
            await increment_link_clicks(db, link_id)
    except Exception:
        CLICK_RECORD_FAILURES.inc()
        logger.exception(f"Failed to record click for link {link_id}", extra={"link_id": link_id})
