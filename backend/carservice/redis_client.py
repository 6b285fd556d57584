# backend/carservice/redis_client.py

import redis

from .config import settings

# Connection is opened lazily on first command
redis_client = redis.from_url(settings.redis_url, decode_responses=True)
