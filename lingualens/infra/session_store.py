"""Redis 세션 저장소

세션 1개 = Redis hash 1개 (session:{session_id}), TTL 2시간.
요청 시작/결과 반영은 Lua 스크립트로 처리해서
"최신 요청 번호 확인 → 결과 기록"이 원자적으로 일어나게 한다.
"""

from typing import Any, Literal, cast

from lingualens.constants import TTL, RedisPrefix
from lingualens.infra.redis import get_redis
from lingualens.schemas.session import ImageAsset, SessionRecord

Slot = Literal["extract", "translate"]

# 반환: 발급된 요청 번호 (세션 없으면 -1)
_BEGIN_SCRIPT = """
if redis.call("EXISTS", KEYS[1]) == 0 then
    return -1
end
redis.call("HINCRBY", KEYS[1], ARGV[1] .. "_inflight", 1)
redis.call("EXPIRE", KEYS[1], ARGV[2])
return redis.call("HINCRBY", KEYS[1], ARGV[1] .. "_seq", 1)
"""

# 추출 결과 반영 (TTL 연장). 새 추출 결과는 이전 번역을 지우고 진행 중인 번역도 무효화한다.
# 반환: 1 반영, 0 늦게 도착해서 폐기, -1 세션 없음
_SETTLE_EXTRACT_SCRIPT = """
if redis.call("EXISTS", KEYS[1]) == 0 then
    return -1
end
if tonumber(redis.call("HGET", KEYS[1], "extract_inflight") or "0") > 0 then
    redis.call("HINCRBY", KEYS[1], "extract_inflight", -1)
end
redis.call("EXPIRE", KEYS[1], ARGV[4])
if tonumber(redis.call("HGET", KEYS[1], "extract_seq") or "0") ~= tonumber(ARGV[1]) then
    return 0
end
redis.call("HSET", KEYS[1], "extracted_text", ARGV[2], "extraction_ok", ARGV[3], "translated_text", "")
redis.call("HINCRBY", KEYS[1], "translate_seq", 1)
return 1
"""

_SETTLE_TRANSLATE_SCRIPT = """
if redis.call("EXISTS", KEYS[1]) == 0 then
    return -1
end
if tonumber(redis.call("HGET", KEYS[1], "translate_inflight") or "0") > 0 then
    redis.call("HINCRBY", KEYS[1], "translate_inflight", -1)
end
redis.call("EXPIRE", KEYS[1], ARGV[3])
if tonumber(redis.call("HGET", KEYS[1], "translate_seq") or "0") ~= tonumber(ARGV[1]) then
    return 0
end
redis.call("HSET", KEYS[1], "translated_text", ARGV[2])
return 1
"""


class SessionMissingError(Exception):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Session not found: {session_id}")


def _key(session_id: str) -> str:
    return f"{RedisPrefix.SESSION}:{session_id}"


def _encode(fields: dict[str, Any]) -> tuple[dict[str, str], list[str]]:
    """hash에 쓸 문자열 매핑과 삭제할 필드 목록으로 분리 (None은 삭제)"""
    mapping: dict[str, str] = {}
    removed: list[str] = []

    for name, value in fields.items():
        if value is None:
            removed.append(name)
        elif isinstance(value, ImageAsset):
            mapping[name] = value.model_dump_json()
        elif isinstance(value, bool):
            mapping[name] = "1" if value else "0"
        else:
            mapping[name] = str(value)

    return mapping, removed


def create(record: SessionRecord) -> None:
    redis = get_redis()
    key = _key(record.session_id)
    mapping, _ = _encode({name: getattr(record, name) for name in SessionRecord.model_fields})

    pipe = redis.pipeline()
    pipe.hset(key, mapping=mapping)
    pipe.expire(key, TTL.SESSION)
    pipe.execute()


def load(session_id: str) -> SessionRecord | None:
    redis = get_redis()
    data = cast(dict[str, Any], redis.hgetall(_key(session_id)))
    if not data:
        return None

    if "image" in data:
        data["image"] = ImageAsset.model_validate_json(data["image"])
    return SessionRecord.model_validate(data)


def update(session_id: str, **fields: Any) -> None:
    """세션 필드 갱신 (None 값은 필드 삭제), TTL 연장

    Raises:
        SessionMissingError: 세션이 없거나 만료된 경우
    """
    redis = get_redis()
    key = _key(session_id)

    if not redis.exists(key):
        raise SessionMissingError(session_id)

    mapping, removed = _encode(fields)
    pipe = redis.pipeline()
    if mapping:
        pipe.hset(key, mapping=mapping)
    if removed:
        pipe.hdel(key, *removed)
    pipe.expire(key, TTL.SESSION)
    pipe.execute()


def begin_request(session_id: str, slot: Slot) -> int:
    """진행 중 카운터 +1, 슬롯 요청 번호 발급

    Raises:
        SessionMissingError: 세션이 없거나 만료된 경우
    """
    redis = get_redis()
    seq: int = redis.eval(_BEGIN_SCRIPT, 1, _key(session_id), slot, TTL.SESSION)  # type: ignore[assignment]
    if seq == -1:
        raise SessionMissingError(session_id)
    return seq


def settle_extraction(session_id: str, seq: int, extracted_text: str, ok: bool) -> bool:
    """추출 결과 반영. seq가 최신일 때만 기록하고 True 반환.

    진행 중 카운터는 반영 여부와 관계없이 감소.
    """
    redis = get_redis()
    result: int = redis.eval(  # type: ignore[assignment]
        _SETTLE_EXTRACT_SCRIPT,
        1,
        _key(session_id),
        seq,
        extracted_text,
        "1" if ok else "0",
        TTL.SESSION,
    )
    return result == 1


def settle_translation(session_id: str, seq: int, translated_text: str) -> bool:
    """번역 결과 반영. seq가 최신일 때만 기록하고 True 반환."""
    redis = get_redis()
    result: int = redis.eval(  # type: ignore[assignment]
        _SETTLE_TRANSLATE_SCRIPT,
        1,
        _key(session_id),
        seq,
        translated_text,
        TTL.SESSION,
    )
    return result == 1
