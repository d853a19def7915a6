"""Gemini 기반 번역 구현체"""

# pyright: reportMissingTypeStubs=false

import json
import logging

from google import genai
from google.genai import types
from pydantic import ValidationError

from lingualens.constants import DEFAULT_TARGET_LANGUAGE
from lingualens.schemas.flows import TranslateTextResponse
from lingualens.services.translation.base import TranslationError

logger = logging.getLogger(__name__)

TRANSLATE_PROMPT = """Translate the following text to {target_language}.
Keep line breaks and tab-separated columns as they are.

Respond only with JSON:
{{"translatedText": "..."}}

Text:
{text}"""


class GeminiTranslation:
    """Google Gemini API를 사용한 텍스트 번역"""

    def __init__(self, api_key: str, model: str) -> None:
        self._api_key = api_key
        self._model = model

    def translate(self, text: str, target_language: str = DEFAULT_TARGET_LANGUAGE) -> str:
        """텍스트를 한 번의 API 호출로 번역

        Raises:
            TranslationError: API 키 누락, API 실패, 빈 응답, 파싱 실패
        """
        if not self._api_key:
            raise TranslationError("GEMINI_API_KEY is not configured")

        client = genai.Client(api_key=self._api_key)
        prompt = TRANSLATE_PROMPT.format(target_language=target_language, text=text)

        try:
            response = client.models.generate_content(
                model=self._model,
                contents=prompt,
                config=types.GenerateContentConfig(response_mime_type="application/json"),
            )
        except Exception as e:
            raise TranslationError(f"Gemini API call failed: {e}") from e

        translated = self._parse(response.text)
        logger.info(f"번역 완료: {target_language}, {len(translated)}자")
        return translated

    def _parse(self, text: str | None) -> str:
        if not text:
            raise TranslationError("Empty response")

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise TranslationError(f"Failed to parse response: {e}") from e

        try:
            return TranslateTextResponse.model_validate(raw).translated_text
        except ValidationError as e:
            raise TranslationError("Response is missing translatedText") from e
