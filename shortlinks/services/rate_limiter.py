from fastapi import Depends, Request
from typing import Optional
from ..redis import redis_client
from ..errors import RateLimitedError
from ..observability import RATE_LIMITED_TOTAL
from ..security import get_optional_owner_id
import time
import logging

logger = logging.getLogger(__name__)

class RateLimiter:
    """Fixed-window limit per caller: the account when signed in, else the client IP.

    Allows everything when Redis is not connected.
    """

    def __init__(self, requests: int, window: int, scope: str):
        self.requests = requests
        self.window = window
        self.scope = scope

    async def __call__(self, request: Request, owner_id: Optional[int] = Depends(get_optional_owner_id)):
        if owner_id is not None:
            caller = f"user:{owner_id}"
        else:
            caller = f"ip:{request.client.host if request.client else 'unknown'}"

        current_window = int(time.time() / self.window)
        key = f"rate:{self.scope}:{caller}:{current_window}"

        count = await redis_client.incr_window(key, self.window)
        if count is not None and count > self.requests:
            RATE_LIMITED_TOTAL.inc()
            logger.warning(f"Rate limit exceeded for {caller} on {self.scope}")
            raise RateLimitedError()
