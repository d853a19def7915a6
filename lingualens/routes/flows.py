"""Flow API 라우트

세션 없이 추출/번역 서비스를 한 번씩 호출하는 엔드포인트.

동기 엔드포인트 - FastAPI가 threadpool에서 실행.
"""

from fastapi import APIRouter, HTTPException, status

from lingualens.schemas.flows import (
    ExtractTextRequest,
    ExtractTextResponse,
    TranslateTextRequest,
    TranslateTextResponse,
)
from lingualens.services.extraction import ExtractionError, get_extraction
from lingualens.services.translation import TranslationError, get_translation

router = APIRouter(prefix="/flows", tags=["flows"])


@router.post("/extract-text", response_model=ExtractTextResponse)
def extract_text(request: ExtractTextRequest) -> ExtractTextResponse:
    try:
        extracted = get_extraction().extract(request.photo_url)
    except ExtractionError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "EXTRACTION_FAILED", "message": f"Failed to extract text: {e}"},
        ) from None
    return ExtractTextResponse(extracted_text=extracted)


@router.post("/translate-text", response_model=TranslateTextResponse)
def translate_text(request: TranslateTextRequest) -> TranslateTextResponse:
    try:
        translated = get_translation().translate(request.text, request.target_language)
    except TranslationError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": "TRANSLATION_FAILED", "message": f"Translation failed: {e}"},
        ) from None
    return TranslateTextResponse(translated_text=translated)
