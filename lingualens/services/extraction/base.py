"""Extraction Protocol

교체 가능한 OCR 구현을 위한 인터페이스 정의.
"""

from typing import Protocol


class ExtractionError(Exception):
    pass


class TextExtractor(Protocol):
    """이미지 텍스트 추출 인터페이스

    구현체:
    - GeminiExtraction: Google Gemini API
    """

    def extract(self, photo_url: str) -> str:
        """이미지에서 텍스트 추출

        Args:
            photo_url: data URL 또는 원격 이미지 URL

        Returns:
            추출된 텍스트 (표는 열 사이를 탭 3개로 구분)

        Raises:
            ExtractionError: 추출 실패 시
        """
        ...
