"""이미지 입력 정규화

파일 업로드 / 원격 URL / 카메라 프레임 세 가지 입력을
추출 단계가 받는 단일 payload(data URL 또는 원격 URL)로 변환한다.
"""

import base64
import binascii
import io
import logging
import mimetypes
import re
from typing import BinaryIO
from urllib.parse import urlparse

import cv2
import numpy as np
from fastapi import UploadFile
from PIL import Image

from lingualens.constants import Limits
from lingualens.schemas.session import ImageAsset, ImageSource

logger = logging.getLogger(__name__)

DATA_URL_PATTERN = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<body>.*)$", re.DOTALL)
DEFAULT_URL_MIME_TYPE = "image/jpeg"
CAPTURE_FILENAME = "capture.jpg"


class ImageReadError(Exception):
    pass


def encode_data_url(content: bytes, mime_type: str) -> str:
    body = base64.b64encode(content).decode()
    return f"data:{mime_type};base64,{body}"


def decode_data_url(data_url: str) -> tuple[bytes, str]:
    """data URL → (바이트, MIME 타입)

    Raises:
        ImageReadError: data URL 형식이 아니거나 base64 디코딩 실패, 내용이 빈 경우
    """
    match = DATA_URL_PATTERN.match(data_url)
    if match is None:
        raise ImageReadError("Invalid data URL")

    try:
        content = base64.b64decode(match["body"], validate=True)
    except binascii.Error as e:
        raise ImageReadError(f"Invalid base64 image data: {e}") from e

    if not content:
        raise ImageReadError("Empty image data")

    return content, match["mime"]


def is_data_url(payload: str) -> bool:
    return payload.startswith("data:")


def guess_url_mime_type(url: str) -> str:
    """URL 경로 확장자로 MIME 추정 (알 수 없으면 image/jpeg)"""
    mime_type, _ = mimetypes.guess_type(urlparse(url).path)
    if mime_type is None or not mime_type.startswith("image/"):
        return DEFAULT_URL_MIME_TYPE
    return mime_type


def detect_mime_type(content: bytes) -> str:
    """실제 이미지 바이트로 MIME 판별 (업로드 시 선언된 content-type은 신뢰하지 않음)

    Raises:
        ImageReadError: 이미지로 디코딩할 수 없는 경우
    """
    try:
        with Image.open(io.BytesIO(content)) as img:
            image_format = img.format
    except Exception as e:
        raise ImageReadError("Failed to decode image") from e

    mime_type = Image.MIME.get(image_format or "")
    if mime_type is None:
        raise ImageReadError(f"Unsupported image format: {image_format}")
    return mime_type


def _to_asset(content: bytes, source: ImageSource, filename: str | None) -> ImageAsset:
    if not content:
        raise ImageReadError("Failed to read file.")
    if len(content) > Limits.MAX_IMAGE_SIZE:
        raise ImageReadError(f"Image too large: exceeds {Limits.MAX_IMAGE_SIZE} bytes")

    mime_type = detect_mime_type(content)
    return ImageAsset(
        source=source,
        mime_type=mime_type,
        payload=encode_data_url(content, mime_type),
        filename=filename,
    )


def read_image_file(fp: BinaryIO, source: ImageSource, filename: str | None = None) -> ImageAsset:
    """file-like 객체 전체를 읽어 data URL ImageAsset 생성

    Raises:
        ImageReadError: 읽기 실패, 빈 내용, 크기 초과, 이미지가 아닌 경우
    """
    try:
        content = fp.read(Limits.MAX_IMAGE_SIZE + 1)
    except OSError as e:
        raise ImageReadError(f"Failed to read file: {e}") from e
    return _to_asset(content, source, filename)


async def read_upload(file: UploadFile) -> ImageAsset:
    """업로드 파일 → ImageAsset

    Raises:
        ImageReadError: 읽기 실패, 빈 내용, 크기 초과, 이미지가 아닌 경우
    """
    chunks: list[bytes] = []
    total_size = 0

    try:
        while chunk := await file.read(Limits.READ_CHUNK_SIZE):
            total_size += len(chunk)
            chunks.append(chunk)
            if total_size > Limits.MAX_IMAGE_SIZE:
                break
    except OSError as e:
        raise ImageReadError(f"Failed to read file: {e}") from e

    return _to_asset(b"".join(chunks), "file", file.filename)


def from_url(url: str) -> ImageAsset:
    """원격 URL은 가져오지 않고 그대로 payload로 사용

    Raises:
        ImageReadError: http/https 절대 URL이 아닌 경우
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ImageReadError(f"Invalid image URL: {url}")

    return ImageAsset(source="url", mime_type=guess_url_mime_type(url), payload=url)


def frame_to_asset(frame: np.ndarray, quality: int = 92) -> ImageAsset:
    """카메라 프레임(BGR) → JPEG → file-like → ImageAsset

    프레임 원본 해상도 그대로 인코딩. 스트림 참조는 보관하지 않는다.

    Raises:
        ImageReadError: 빈 프레임 또는 JPEG 인코딩 실패
    """
    if frame.size == 0:
        raise ImageReadError("Empty camera frame")

    ok, encoded = cv2.imencode(".jpg", frame, [cv2.IMWRITE_JPEG_QUALITY, quality])
    if not ok:
        raise ImageReadError("Failed to encode camera frame")

    height, width = frame.shape[:2]
    logger.info(f"카메라 프레임 인코딩: {width}x{height}, {encoded.size} bytes")

    with io.BytesIO(encoded.tobytes()) as fp:
        return read_image_file(fp, "camera", CAPTURE_FILENAME)
