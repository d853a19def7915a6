"""Camera Protocol

카메라 장치 접근을 교체 가능하게 하기 위한 인터페이스 정의.
facing mode: "user"(전면) / "environment"(후면)
"""

from typing import Protocol

import numpy as np

from lingualens.schemas.session import FacingMode


class CameraUnavailableError(Exception):
    """요청한 facing mode의 카메라를 열 수 없음"""


class CameraPermissionError(Exception):
    """카메라 접근 거부 또는 사용 가능한 카메라 없음"""


class CameraStream(Protocol):
    def read(self) -> np.ndarray:
        """현재 프레임 (BGR)

        Raises:
            CameraUnavailableError: 프레임을 읽지 못한 경우
        """
        ...

    def release(self) -> None: ...


class CameraBackend(Protocol):
    """카메라 장치 인터페이스

    구현체:
    - OpenCVCamera: OpenCV VideoCapture
    """

    def open(self, facing_mode: FacingMode) -> CameraStream:
        """facing mode에 해당하는 카메라 스트림 열기

        다른 장치로 대체하지 않는다 (hard constraint).

        Raises:
            CameraUnavailableError: 장치를 열 수 없는 경우
        """
        ...
