from collections.abc import Generator
from io import BytesIO

import fakeredis
import numpy as np
import pytest
from fastapi.testclient import TestClient
from PIL import Image

from lingualens.infra.redis import set_redis
from lingualens.main import app
from lingualens.schemas.session import FacingMode
from lingualens.services.camera import CameraProbe, CameraUnavailableError, set_camera_probe
from lingualens.services.extraction import set_extraction
from lingualens.services.translation import set_translation


def make_test_image(width: int = 64, height: int = 48, fmt: str = "PNG") -> BytesIO:
    """테스트용 실제 이미지 바이트 생성"""
    img = Image.new("RGB", (width, height), color="red")
    buf = BytesIO()
    img.save(buf, format=fmt)
    buf.seek(0)
    return buf


def make_frame(width: int = 640, height: int = 480) -> np.ndarray:
    """테스트용 카메라 프레임 (BGR)"""
    return np.full((height, width, 3), 128, dtype=np.uint8)


class FakeExtractor:
    def __init__(self, text: str = "Hello\tWorld", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[str] = []

    def extract(self, photo_url: str) -> str:
        self.calls.append(photo_url)
        if self.error is not None:
            raise self.error
        return self.text


class FakeTranslator:
    def __init__(self, text: str = "Hola", error: Exception | None = None) -> None:
        self.text = text
        self.error = error
        self.calls: list[tuple[str, str]] = []

    def translate(self, text: str, target_language: str = "es") -> str:
        self.calls.append((text, target_language))
        if self.error is not None:
            raise self.error
        return self.text


class FakeStream:
    def __init__(self, backend: "FakeCameraBackend") -> None:
        self._backend = backend

    def read(self) -> np.ndarray:
        if self._backend.frame is None:
            raise CameraUnavailableError("no frame")
        return self._backend.frame

    def release(self) -> None:
        self._backend.released += 1


class FakeCameraBackend:
    def __init__(
        self,
        available: set[FacingMode] | None = None,
        frame: np.ndarray | None = None,
    ) -> None:
        self.available: set[FacingMode] = available if available is not None else set()
        self.frame = frame
        self.attempts: list[FacingMode] = []
        self.opened = 0
        self.released = 0

    def open(self, facing_mode: FacingMode) -> FakeStream:
        self.attempts.append(facing_mode)
        if facing_mode not in self.available:
            raise CameraUnavailableError(f"{facing_mode} not available")
        self.opened += 1
        return FakeStream(self)


@pytest.fixture
def fake_redis() -> Generator[fakeredis.FakeRedis, None, None]:
    r = fakeredis.FakeRedis(decode_responses=True)
    set_redis(r)
    yield r
    set_redis(None)


@pytest.fixture
def fake_extractor() -> Generator[FakeExtractor, None, None]:
    extractor = FakeExtractor()
    set_extraction(extractor)
    yield extractor
    set_extraction(None)


@pytest.fixture
def fake_translator() -> Generator[FakeTranslator, None, None]:
    translator = FakeTranslator()
    set_translation(translator)
    yield translator
    set_translation(None)


@pytest.fixture
def camera_backend() -> Generator[FakeCameraBackend, None, None]:
    """전면/후면 모두 있는 카메라 (probe는 아직 실행 전)"""
    backend = FakeCameraBackend(available={"user", "environment"}, frame=make_frame())
    set_camera_probe(CameraProbe(backend))
    yield backend
    set_camera_probe(None)


@pytest.fixture
def client(
    fake_redis: fakeredis.FakeRedis,
    fake_extractor: FakeExtractor,
    fake_translator: FakeTranslator,
    camera_backend: FakeCameraBackend,
) -> TestClient:
    return TestClient(app)


@pytest.fixture
def session_id(client: TestClient) -> str:
    response = client.post("/sessions")
    return response.json()["sessionId"]
