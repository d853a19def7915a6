"""Camera 모듈

사용법:
    from lingualens.services.camera import get_camera_probe

    probe = get_camera_probe()
    capabilities = await probe.probe()
    frame = await probe.capture("environment")

백엔드 선택 (.env CAMERA_PROVIDER):
    - "opencv": OpenCV VideoCapture (기본값)
"""

from lingualens.config import get_settings
from lingualens.services.camera.base import (
    CameraBackend,
    CameraPermissionError,
    CameraStream,
    CameraUnavailableError,
)
from lingualens.services.camera.opencv import OpenCVCamera
from lingualens.services.camera.probe import CameraProbe

__all__ = [
    "CameraBackend",
    "CameraPermissionError",
    "CameraProbe",
    "CameraStream",
    "CameraUnavailableError",
    "get_camera_probe",
    "set_camera_probe",
]

_probe: CameraProbe | None = None


def get_camera_probe() -> CameraProbe:
    """설정에 따라 카메라 백엔드를 감싼 probe 반환 (프로세스 단위 1개)"""
    global _probe
    if _probe is None:
        settings = get_settings()
        if settings.camera_provider == "opencv":
            _probe = CameraProbe(
                OpenCVCamera(
                    front_index=settings.camera_front_index,
                    back_index=settings.camera_back_index,
                )
            )
        else:
            raise ValueError(f"Unknown camera provider: {settings.camera_provider!r}")
    return _probe


def set_camera_probe(probe: CameraProbe | None) -> None:
    """camera probe 설정 (테스트용)"""
    global _probe
    _probe = probe
