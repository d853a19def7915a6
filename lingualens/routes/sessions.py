"""Session API 라우트

이미지 선택 → 텍스트 추출 → 번역 흐름을 세션 단위로 노출.
모든 에러는 여기서 HTTPException({code, message})으로 변환한다.
"""

from typing import Annotated

from fastapi import APIRouter, File, HTTPException, UploadFile, status

from lingualens.schemas.session import (
    ActionResult,
    CameraToggleRequest,
    ImageUrlRequest,
    LanguageRequest,
    SessionState,
)
from lingualens.services import session as session_service

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _http_error(e: session_service.SessionError) -> HTTPException:
    return HTTPException(
        status_code=e.status_code,
        detail={"code": e.code, "message": e.message},
    )


@router.post("", response_model=SessionState, status_code=status.HTTP_201_CREATED)
async def create_session() -> SessionState:
    return await session_service.create_session()


@router.get("/{session_id}", response_model=SessionState)
async def read_session(session_id: str) -> SessionState:
    try:
        return await session_service.get_session(session_id)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.post("/{session_id}/image", response_model=SessionState)
async def upload_image(session_id: str, file: Annotated[UploadFile, File()]) -> SessionState:
    try:
        return await session_service.set_image_from_file(session_id, file)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.post("/{session_id}/image/url", response_model=SessionState)
async def set_image_url(session_id: str, request: ImageUrlRequest) -> SessionState:
    try:
        return await session_service.set_image_from_url(session_id, request.image_url)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.delete("/{session_id}/image", response_model=SessionState)
async def clear_image(session_id: str) -> SessionState:
    try:
        return await session_service.clear_image(session_id)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.post("/{session_id}/extract", response_model=ActionResult)
async def extract_text(session_id: str) -> ActionResult:
    """텍스트 추출 요청

    외부 서비스 실패는 200 + 고정 문구 + destructive 알림으로 응답한다.
    """
    try:
        return await session_service.request_extraction(session_id)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.put("/{session_id}/language", response_model=SessionState)
async def set_language(session_id: str, request: LanguageRequest) -> SessionState:
    try:
        return await session_service.set_target_language(session_id, request.target_language)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.post("/{session_id}/translate", response_model=ActionResult)
async def translate_text(session_id: str) -> ActionResult:
    try:
        return await session_service.request_translation(session_id)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.put("/{session_id}/camera", response_model=SessionState)
async def toggle_camera(session_id: str, request: CameraToggleRequest) -> SessionState:
    try:
        return await session_service.set_camera_enabled(session_id, request.enabled)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.post("/{session_id}/camera/rotate", response_model=SessionState)
async def rotate_camera(session_id: str) -> SessionState:
    try:
        return await session_service.rotate_camera(session_id)
    except session_service.SessionError as e:
        raise _http_error(e) from None


@router.post("/{session_id}/camera/capture", response_model=SessionState)
async def capture_image(session_id: str) -> SessionState:
    try:
        return await session_service.capture_image(session_id)
    except session_service.SessionError as e:
        raise _http_error(e) from None
