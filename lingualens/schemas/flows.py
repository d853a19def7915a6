"""추출/번역 서비스 경계 스키마

세션 없이 호출하는 단발성 엔드포인트와 Gemini 응답 파싱에 함께 사용.
"""

from lingualens.constants import DEFAULT_TARGET_LANGUAGE
from lingualens.schemas.base import BaseSchema


class ExtractTextRequest(BaseSchema):
    photo_url: str  # data URL 또는 원격 URL


class ExtractTextResponse(BaseSchema):
    extracted_text: str


class TranslateTextRequest(BaseSchema):
    text: str
    target_language: str = DEFAULT_TARGET_LANGUAGE


class TranslateTextResponse(BaseSchema):
    translated_text: str
