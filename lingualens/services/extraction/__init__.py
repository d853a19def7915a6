"""Extraction 모듈

사용법:
    from lingualens.services.extraction import get_extraction

    extractor = get_extraction()
    text = extractor.extract(photo_url)

백엔드 선택 (.env EXTRACTION_PROVIDER):
    - "gemini": Google Gemini API (기본값)
"""

from lingualens.config import get_settings
from lingualens.services.extraction.base import ExtractionError, TextExtractor
from lingualens.services.extraction.gemini import GeminiExtraction

__all__ = ["TextExtractor", "ExtractionError", "get_extraction", "set_extraction"]

_extractor: TextExtractor | None = None


def get_extraction() -> TextExtractor:
    """설정에 따라 extraction 백엔드 반환"""
    global _extractor
    if _extractor is None:
        settings = get_settings()
        if settings.extraction_provider == "gemini":
            _extractor = GeminiExtraction(
                api_key=settings.gemini_api_key,
                model=settings.gemini_model,
            )
        else:
            raise ValueError(f"Unknown extraction provider: {settings.extraction_provider!r}")
    return _extractor


def set_extraction(extractor: TextExtractor | None) -> None:
    """extraction 백엔드 설정 (테스트용)"""
    global _extractor
    _extractor = extractor
