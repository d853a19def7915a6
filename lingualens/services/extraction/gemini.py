"""Gemini 기반 OCR 구현체"""

# pyright: reportMissingTypeStubs=false

import json
import logging

from google import genai
from google.genai import types
from pydantic import ValidationError

from lingualens.schemas.flows import ExtractTextResponse
from lingualens.services.extraction.base import ExtractionError
from lingualens.services.image_source import (
    ImageReadError,
    decode_data_url,
    guess_url_mime_type,
    is_data_url,
)

logger = logging.getLogger(__name__)

EXTRACT_PROMPT = """You are an OCR service. Extract the text from the attached image.

Format the extracted text similar to the image text format.
For table formats, use 3 tab spaces to separate a column.

Respond only with JSON:
{"extractedText": "..."}"""


class GeminiExtraction:
    """Google Gemini API를 사용한 이미지 텍스트 추출"""

    def __init__(self, api_key: str, model: str) -> None:
        self._api_key = api_key
        self._model = model

    def extract(self, photo_url: str) -> str:
        """이미지 1장에서 텍스트 추출

        Raises:
            ExtractionError: API 키 누락, 잘못된 data URL, API 실패, 빈 응답, 파싱 실패
        """
        if not self._api_key:
            raise ExtractionError("GEMINI_API_KEY is not configured")

        image_part = self._to_part(photo_url)
        client = genai.Client(api_key=self._api_key)

        try:
            response = client.models.generate_content(
                model=self._model,
                contents=[EXTRACT_PROMPT, image_part],
                config=types.GenerateContentConfig(response_mime_type="application/json"),
            )
        except Exception as e:
            raise ExtractionError(f"Gemini API call failed: {e}") from e

        extracted = self._parse(response.text)
        logger.info(f"텍스트 추출 완료: {len(extracted)}자")
        return extracted

    def _to_part(self, photo_url: str) -> types.Part:
        """data URL은 inline bytes로, 원격 URL은 그대로 URI로 전달"""
        if is_data_url(photo_url):
            try:
                content, mime_type = decode_data_url(photo_url)
            except ImageReadError as e:
                raise ExtractionError(str(e)) from e
            return types.Part.from_bytes(data=content, mime_type=mime_type)

        return types.Part.from_uri(file_uri=photo_url, mime_type=guess_url_mime_type(photo_url))

    def _parse(self, text: str | None) -> str:
        if not text:
            raise ExtractionError("Empty response")

        try:
            raw = json.loads(text)
        except json.JSONDecodeError as e:
            raise ExtractionError(f"Failed to parse response: {e}") from e

        try:
            return ExtractTextResponse.model_validate(raw).extracted_text
        except ValidationError as e:
            raise ExtractionError("Response is missing extractedText") from e
