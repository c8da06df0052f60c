import logging
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import settings
from ..crud import short_code_exists
from ..errors import CodeTakenError, ExhaustedError
from ..utils import generate_random_code

logger = logging.getLogger(__name__)

# Top-level paths served by the app itself; a link with one of these codes
# would never be reachable through the redirect route.
RESERVED_CODES = frozenset({
    "api", "health", "metrics", "docs", "redoc", "openapi.json", "favicon.ico",
})

async def generate(db: AsyncSession) -> str:
    """Draw random codes until one is free in the store."""
    for attempt in range(1, settings.CODE_GENERATION_ATTEMPTS + 1):
        code = generate_random_code(settings.SHORT_CODE_LENGTH)
        if code not in RESERVED_CODES and not await short_code_exists(db, code):
            return code
        logger.warning(f"Short code collision on attempt {attempt}, retrying")
    raise ExhaustedError()

async def validate_custom(db: AsyncSession, code: str) -> str:
    if code in RESERVED_CODES or await short_code_exists(db, code):
        raise CodeTakenError()
    return code
