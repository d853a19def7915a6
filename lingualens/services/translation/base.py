"""Translation Protocol

교체 가능한 번역 구현을 위한 인터페이스 정의.
"""

from typing import Protocol

from lingualens.constants import DEFAULT_TARGET_LANGUAGE


class TranslationError(Exception):
    pass


class Translator(Protocol):
    """텍스트 번역 인터페이스

    구현체:
    - GeminiTranslation: Google Gemini API
    """

    def translate(self, text: str, target_language: str = DEFAULT_TARGET_LANGUAGE) -> str:
        """텍스트 번역

        언어 코드 유효성은 검사하지 않는다 (잘못된 코드는 외부 서비스 실패로 처리).

        Args:
            text: 원문
            target_language: 대상 언어 코드 (예: es, fr, de)

        Returns:
            번역된 텍스트

        Raises:
            TranslationError: 번역 실패 시
        """
        ...
