import re


class SessionId:
    PREFIX = "sess_"
    PATTERN = re.compile(r"^sess_[a-f0-9]{16}$")


class TTL:
    SESSION = 60 * 60 * 2  # 2시간 (브라우저 세션 수명)


class RedisPrefix:
    SESSION = "session"


class Limits:
    MAX_IMAGE_SIZE = 5 * 1024 * 1024  # 5MB
    READ_CHUNK_SIZE = 1024 * 1024  # 1MB


class Placeholder:
    """서비스 실패 시 결과 슬롯에 들어가는 고정 문구"""

    EXTRACTION_ERROR = "Error extracting text. Please try again."
    TRANSLATION_ERROR = "Error translating text. Please try again."
    CAMERA_WARNING = (
        "Camera access is unavailable. Allow camera permission or upload an image instead."
    )


DEFAULT_TARGET_LANGUAGE = "es"

# 언어 선택 UI 옵션 (code → label)
SUPPORTED_LANGUAGES: dict[str, str] = {
    "es": "Spanish",
    "fr": "French",
    "de": "German",
}
