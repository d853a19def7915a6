"""OpenCV VideoCapture 기반 카메라 구현체"""

import cv2
import numpy as np

from lingualens.schemas.session import FacingMode
from lingualens.services.camera.base import CameraUnavailableError


class OpenCVStream:
    def __init__(self, capture: cv2.VideoCapture) -> None:
        self._capture = capture

    def read(self) -> np.ndarray:
        ok, frame = self._capture.read()
        if not ok or frame is None:
            raise CameraUnavailableError("Camera opened but returned no frame")
        return frame

    def release(self) -> None:
        self._capture.release()


class OpenCVCamera:
    """facing mode를 장치 인덱스에 매핑

    OpenCV는 facing mode 개념이 없으므로 설정의 인덱스로 전면/후면을 구분한다.
    """

    def __init__(self, front_index: int = 0, back_index: int = 1) -> None:
        self._indices: dict[FacingMode, int] = {
            "user": front_index,
            "environment": back_index,
        }

    def open(self, facing_mode: FacingMode) -> OpenCVStream:
        index = self._indices[facing_mode]
        capture = cv2.VideoCapture(index)
        if not capture.isOpened():
            capture.release()
            raise CameraUnavailableError(f"Camera not available: {facing_mode} (device {index})")
        return OpenCVStream(capture)
