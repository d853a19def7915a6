"""Session 서비스: 이미지 선택 → 텍스트 추출 → 번역 상태 관리

세션 상태(이미지, 추출/번역 결과, 대상 언어, 진행 플래그, 카메라 설정)는
이 모듈만 변경한다. route는 호출과 에러 → HTTP 변환만 담당.

동시 요청: 슬롯별 요청 번호를 발급하고, 결과는 가장 최근 요청의 것만 반영한다.
늦게 끝난 이전 요청의 결과는 버린다.
"""

import asyncio
import logging
import uuid
from datetime import UTC, datetime

from fastapi import UploadFile

from lingualens.config import get_settings
from lingualens.constants import SUPPORTED_LANGUAGES, Placeholder, SessionId
from lingualens.infra import session_store
from lingualens.infra.session_store import SessionMissingError
from lingualens.schemas.session import (
    ActionResult,
    ImageAsset,
    Notification,
    SessionRecord,
    SessionState,
)
from lingualens.services.camera import CameraPermissionError, get_camera_probe
from lingualens.services.extraction import ExtractionError, get_extraction
from lingualens.services.image_source import (
    ImageReadError,
    frame_to_asset,
    from_url,
    read_upload,
)
from lingualens.services.translation import TranslationError, get_translation

logger = logging.getLogger(__name__)


class SessionError(Exception):
    """세션 작업 관련 에러

    code로 구체적인 원인 구분:
    - INVALID_SESSION_ID: 세션 ID 형식 오류 (400)
    - SESSION_NOT_FOUND: 세션 없음/만료 (404)
    - MISSING_INPUT: 이미지 없음 / 추출 텍스트 없음 (400)
    - IMAGE_READ_FAILED: 파일/URL/카메라 프레임 읽기 실패 (400)
    - UNSUPPORTED_LANGUAGE: 선택 목록에 없는 언어 (400)
    - CAMERA_DISABLED: 카메라 모드가 꺼진 상태에서 캡처 (400)
    - CAMERA_UNAVAILABLE: 카메라 권한 거부/장치 없음 (403)
    """

    STATUS_MAP: dict[str, int] = {
        "INVALID_SESSION_ID": 400,
        "SESSION_NOT_FOUND": 404,
        "MISSING_INPUT": 400,
        "IMAGE_READ_FAILED": 400,
        "UNSUPPORTED_LANGUAGE": 400,
        "CAMERA_DISABLED": 400,
        "CAMERA_UNAVAILABLE": 403,
    }

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

    @property
    def status_code(self) -> int:
        return self.STATUS_MAP.get(self.code, 500)


class MissingInputError(SessionError):
    def __init__(self, message: str):
        super().__init__("MISSING_INPUT", message)


class SessionNotFoundError(SessionError):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__("SESSION_NOT_FOUND", f"Session not found: {session_id}")


def _now() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


def _generate_session_id() -> str:
    return f"{SessionId.PREFIX}{uuid.uuid4().hex[:16]}"


def _validate_session_id(session_id: str) -> None:
    if not SessionId.PATTERN.match(session_id):
        raise SessionError("INVALID_SESSION_ID", f"Invalid session ID: {session_id}")


def _require_record(session_id: str) -> SessionRecord:
    _validate_session_id(session_id)
    record = session_store.load(session_id)
    if record is None:
        raise SessionNotFoundError(session_id)
    return record


def _update(session_id: str, **fields: object) -> None:
    try:
        session_store.update(session_id, **fields)
    except SessionMissingError:
        raise SessionNotFoundError(session_id) from None


def _to_state(record: SessionRecord) -> SessionState:
    return SessionState(
        session_id=record.session_id,
        image=record.image,
        extracted_text=record.extracted_text,
        translated_text=record.translated_text,
        target_language=record.target_language,
        extracting=record.extract_inflight > 0,
        translating=record.translate_inflight > 0,
        camera_enabled=record.camera_enabled,
        facing_mode=record.facing_mode,
        camera_warning=record.camera_warning,
        created_at=record.created_at,
    )


def _current_state(session_id: str) -> SessionState:
    return _to_state(_require_record(session_id))


async def create_session() -> SessionState:
    record = SessionRecord(session_id=_generate_session_id(), created_at=_now())
    session_store.create(record)
    logger.info(f"[{record.session_id}] 세션 생성")
    return _to_state(record)


async def get_session(session_id: str) -> SessionState:
    return _current_state(session_id)


# --- 이미지 선택 ---


def _replace_image(session_id: str, asset: ImageAsset) -> SessionState:
    """기존 이미지를 통째로 교체 (미리보기도 함께 교체됨)"""
    _update(session_id, image=asset)
    logger.info(f"[{session_id}] 이미지 교체: source={asset.source}, mime={asset.mime_type}")
    return _current_state(session_id)


async def set_image_from_file(session_id: str, file: UploadFile) -> SessionState:
    _require_record(session_id)

    try:
        asset = await read_upload(file)
    except ImageReadError as e:
        raise SessionError("IMAGE_READ_FAILED", str(e)) from None

    return _replace_image(session_id, asset)


async def set_image_from_url(session_id: str, url: str) -> SessionState:
    _require_record(session_id)

    try:
        asset = from_url(url)
    except ImageReadError as e:
        raise SessionError("IMAGE_READ_FAILED", str(e)) from None

    return _replace_image(session_id, asset)


async def capture_image(session_id: str) -> SessionState:
    """카메라 프레임 1장을 새 이미지로 사용

    Raises:
        SessionError: CAMERA_DISABLED / CAMERA_UNAVAILABLE / IMAGE_READ_FAILED
    """
    record = _require_record(session_id)
    if not record.camera_enabled:
        raise SessionError("CAMERA_DISABLED", "Turn on the camera before capturing.")

    try:
        frame = await get_camera_probe().capture(record.facing_mode)
    except CameraPermissionError as e:
        logger.warning(f"[{session_id}] 카메라 접근 불가: {e}")
        _update(session_id, camera_warning=Placeholder.CAMERA_WARNING)
        raise SessionError("CAMERA_UNAVAILABLE", str(e)) from None
    except ImageReadError as e:
        raise SessionError("IMAGE_READ_FAILED", str(e)) from None

    try:
        asset = frame_to_asset(frame, quality=get_settings().camera_jpeg_quality)
    except ImageReadError as e:
        raise SessionError("IMAGE_READ_FAILED", str(e)) from None

    return _replace_image(session_id, asset)


async def clear_image(session_id: str) -> SessionState:
    _require_record(session_id)
    _update(session_id, image=None)
    return _current_state(session_id)


# --- 카메라 ---


async def set_camera_enabled(session_id: str, enabled: bool) -> SessionState:
    """카메라 모드 전환. 켜고 끌 때 모두 현재 이미지를 지운다.

    사용 가능한 카메라가 없으면 켜지 않고 camera_warning을 남긴다.
    """
    record = _require_record(session_id)

    if not enabled:
        _update(session_id, camera_enabled=False, image=None)
        return _current_state(session_id)

    probe = get_camera_probe()
    if not probe.probed:
        await probe.probe()

    capabilities = probe.capabilities
    if not capabilities.has_front and not capabilities.has_back:
        logger.warning(f"[{session_id}] 사용 가능한 카메라 없음")
        _update(
            session_id,
            camera_enabled=False,
            image=None,
            camera_warning=Placeholder.CAMERA_WARNING,
        )
        return _current_state(session_id)

    facing_mode = record.facing_mode
    if facing_mode is None or not probe.is_available(facing_mode):
        facing_mode = capabilities.default_facing

    _update(
        session_id,
        camera_enabled=True,
        image=None,
        facing_mode=facing_mode,
        camera_warning=None,
    )
    return _current_state(session_id)


async def rotate_camera(session_id: str) -> SessionState:
    """전면 ↔ 후면 전환. 둘 다 탐지된 경우에만 동작하고 재탐지는 하지 않는다."""
    record = _require_record(session_id)
    probe = get_camera_probe()

    if not probe.can_rotate():
        return _to_state(record)

    facing_mode = "user" if record.facing_mode == "environment" else "environment"
    _update(session_id, facing_mode=facing_mode)
    return _current_state(session_id)


# --- 언어 ---


async def set_target_language(session_id: str, code: str) -> SessionState:
    """대상 언어만 변경 (자동 재번역 없음)"""
    _require_record(session_id)

    if code not in SUPPORTED_LANGUAGES:
        raise SessionError("UNSUPPORTED_LANGUAGE", f"Unsupported language: {code}")

    _update(session_id, target_language=code)
    return _current_state(session_id)


# --- 추출 / 번역 ---


async def request_extraction(session_id: str) -> ActionResult:
    """현재 이미지에서 텍스트 추출

    성공 시 이전 번역 결과는 지운다. 실패 시 추출 슬롯에 고정 문구를 넣는다.

    Raises:
        MissingInputError: 이미지가 없음 (외부 호출 없음)
    """
    record = _require_record(session_id)
    if record.image is None:
        raise MissingInputError("Please upload an image first.")

    try:
        seq = session_store.begin_request(session_id, "extract")
    except SessionMissingError:
        raise SessionNotFoundError(session_id) from None

    extracted_text = Placeholder.EXTRACTION_ERROR
    ok = False
    try:
        extracted_text = await asyncio.to_thread(get_extraction().extract, record.image.payload)
        ok = True
        notification = Notification(
            title="Text Extracted",
            description="Text successfully extracted from the image.",
        )
    except ExtractionError as e:
        logger.error(f"[{session_id}] 텍스트 추출 실패: {e}")
        notification = _failure("Failed to extract text", e)
    except Exception as e:
        logger.exception(f"[{session_id}] 텍스트 추출 중 예외 발생: {e}")
        notification = _failure("Failed to extract text", e)
    finally:
        applied = session_store.settle_extraction(session_id, seq, extracted_text, ok)

    if not applied:
        logger.warning(f"[{session_id}] 이전 추출 요청 결과 폐기: seq={seq}")

    return ActionResult(session=_current_state(session_id), notification=notification)


async def request_translation(session_id: str) -> ActionResult:
    """추출된 텍스트를 현재 대상 언어로 번역

    Raises:
        MissingInputError: 성공한 추출 텍스트가 없음 (외부 호출 없음)
    """
    record = _require_record(session_id)
    if not record.extraction_ok or not record.extracted_text:
        raise MissingInputError(
            "No text to translate. Please upload an image and extract text first."
        )

    try:
        seq = session_store.begin_request(session_id, "translate")
    except SessionMissingError:
        raise SessionNotFoundError(session_id) from None

    translated_text = Placeholder.TRANSLATION_ERROR
    try:
        translated_text = await asyncio.to_thread(
            get_translation().translate, record.extracted_text, record.target_language
        )
        notification = Notification(
            title="Text Translated",
            description="Text translated successfully.",
        )
    except TranslationError as e:
        logger.error(f"[{session_id}] 번역 실패: {e}")
        notification = _failure("Translation failed", e)
    except Exception as e:
        logger.exception(f"[{session_id}] 번역 중 예외 발생: {e}")
        notification = _failure("Translation failed", e)
    finally:
        applied = session_store.settle_translation(session_id, seq, translated_text)

    if not applied:
        logger.warning(f"[{session_id}] 이전 번역 요청 결과 폐기: seq={seq}")

    return ActionResult(session=_current_state(session_id), notification=notification)


def _failure(prefix: str, error: Exception) -> Notification:
    return Notification(title="Error", description=f"{prefix}: {error}", variant="destructive")
