"""세션 데이터 모델

브라우저 세션 하나가 가지는 상태 전체. Redis에 TTL로만 보관되고 디스크에는 남지 않는다.
"""

from typing import Literal

from pydantic import BaseModel

from lingualens.constants import DEFAULT_TARGET_LANGUAGE
from lingualens.schemas.base import BaseSchema

FacingMode = Literal["user", "environment"]
ImageSource = Literal["file", "url", "camera"]
NotificationVariant = Literal["default", "destructive"]


class ImageAsset(BaseSchema):
    """현재 선택된 이미지

    payload는 추출 단계가 그대로 받는 canonical 표현:
    - file/camera: data URL (data:<mime>;base64,<body>)
    - url: 사용자가 입력한 원격 URL 그대로
    """

    source: ImageSource
    mime_type: str
    payload: str
    filename: str | None = None


class CameraCapabilities(BaseSchema):
    """카메라 탐지 결과

    checking은 probe 실행 중에만 True.
    """

    has_front: bool = False
    has_back: bool = False
    checking: bool = False
    default_facing: FacingMode | None = None
    can_rotate: bool = False


class SessionRecord(BaseModel):
    """Redis hash에 저장되는 세션 레코드

    *_seq: 슬롯별로 마지막으로 발급된 요청 번호 (늦게 도착한 응답 폐기용)
    *_inflight: 슬롯별 진행 중 요청 수 (extracting/translating 플래그의 근거)
    """

    session_id: str
    created_at: str
    image: ImageAsset | None = None
    extracted_text: str = ""
    extraction_ok: bool = False
    translated_text: str = ""
    target_language: str = DEFAULT_TARGET_LANGUAGE
    extract_seq: int = 0
    extract_inflight: int = 0
    translate_seq: int = 0
    translate_inflight: int = 0
    camera_enabled: bool = False
    facing_mode: FacingMode | None = None
    camera_warning: str | None = None


class SessionState(BaseSchema):
    """클라이언트에 내려가는 세션 상태"""

    session_id: str
    image: ImageAsset | None = None
    extracted_text: str = ""
    translated_text: str = ""
    target_language: str = DEFAULT_TARGET_LANGUAGE
    extracting: bool = False
    translating: bool = False
    camera_enabled: bool = False
    facing_mode: FacingMode | None = None
    camera_warning: str | None = None
    created_at: str


class Notification(BaseSchema):
    """사용자에게 띄울 알림 (toast)"""

    title: str
    description: str
    variant: NotificationVariant = "default"


class ActionResult(BaseSchema):
    """추출/번역 요청 결과"""

    session: SessionState
    notification: Notification


class ImageUrlRequest(BaseSchema):
    image_url: str


class LanguageRequest(BaseSchema):
    target_language: str


class CameraToggleRequest(BaseSchema):
    enabled: bool


class LanguageOption(BaseSchema):
    code: str
    label: str
