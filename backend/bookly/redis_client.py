# backend/bookly/redis_client.py

from typing import Optional

from redis import Redis

from .config import get_settings

_url = get_settings().redis_url

# None when REDIS_URL is not configured: reservation locks stay in-process
redis_client: Optional[Redis] = Redis.from_url(_url) if _url else None
