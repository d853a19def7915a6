"""세션 저장용 Redis 클라이언트 (프로세스 단위 1개)"""

import logging

import redis

from lingualens.config import get_settings

logger = logging.getLogger(__name__)

_client: redis.Redis | None = None


def get_redis() -> redis.Redis:
    global _client
    if _client is None:
        settings = get_settings()
        _client = redis.Redis(
            host=settings.redis_host,
            port=settings.redis_port,
            db=settings.redis_db,
            decode_responses=True,
        )
    return _client


def ping_redis() -> bool:
    """세션 저장소 연결 확인 (health 체크용)"""
    try:
        return bool(get_redis().ping())
    except redis.RedisError as e:
        logger.warning(f"Redis 연결 실패: {e}")
        return False


def close_redis() -> None:
    global _client
    if _client is not None:
        _client.close()
        _client = None


def set_redis(client: redis.Redis | None) -> None:
    """Redis 클라이언트 설정 (테스트용)"""
    global _client
    _client = client
