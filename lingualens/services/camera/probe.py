"""카메라 탐지 및 프레임 캡처

전면/후면 카메라를 각각 독립적으로 열어보고 결과만 기록한다.
열었던 스트림은 탐지 직후 모두 해제.
"""

import asyncio
import logging

import numpy as np

from lingualens.schemas.session import CameraCapabilities, FacingMode
from lingualens.services.camera.base import (
    CameraBackend,
    CameraPermissionError,
    CameraUnavailableError,
)
from lingualens.services.image_source import ImageReadError

logger = logging.getLogger(__name__)


class CameraProbe:
    def __init__(self, backend: CameraBackend) -> None:
        self._backend = backend
        self._has_front = False
        self._has_back = False
        self._checking = False
        self._probed = False
        self._running: asyncio.Task[CameraCapabilities] | None = None

    @property
    def probed(self) -> bool:
        return self._probed

    @property
    def checking(self) -> bool:
        return self._checking

    @property
    def default_facing(self) -> FacingMode | None:
        """전면만 있으면 전면, 그 외에는 후면 (둘 다 없으면 None)"""
        if self._has_front and not self._has_back:
            return "user"
        if self._has_back:
            return "environment"
        return None

    @property
    def capabilities(self) -> CameraCapabilities:
        return CameraCapabilities(
            has_front=self._has_front,
            has_back=self._has_back,
            checking=self._checking,
            default_facing=self.default_facing,
            can_rotate=self.can_rotate(),
        )

    def can_rotate(self) -> bool:
        return self._has_front and self._has_back

    def is_available(self, facing_mode: FacingMode) -> bool:
        return self._has_front if facing_mode == "user" else self._has_back

    async def probe(self) -> CameraCapabilities:
        """전면/후면 카메라 사용 가능 여부 탐지

        한쪽 실패가 다른 쪽 탐지를 막지 않는다.
        이미 진행 중인 탐지가 있으면 새로 시작하지 않고 그 결과를 함께 기다린다.
        """
        if self._running is None:
            self._running = asyncio.create_task(self._run())
        return await asyncio.shield(self._running)

    async def _run(self) -> CameraCapabilities:
        self._checking = True
        try:
            has_front = await asyncio.to_thread(self._try_open, "user")
            has_back = await asyncio.to_thread(self._try_open, "environment")
            # 두 결과를 함께 반영 (탐지 중에는 이전 결과 유지)
            self._has_front, self._has_back = has_front, has_back
            self._probed = True
        finally:
            self._checking = False
            self._running = None

        logger.info(f"카메라 탐지 완료: front={has_front}, back={has_back}")
        return self.capabilities

    def _try_open(self, facing_mode: FacingMode) -> bool:
        try:
            stream = self._backend.open(facing_mode)
        except Exception as e:
            logger.warning(f"카메라 사용 불가 ({facing_mode}): {e}")
            return False
        stream.release()
        return True

    async def capture(self, facing_mode: FacingMode | None = None) -> np.ndarray:
        """프레임 1장 캡처 (열기 → 읽기 → 해제)

        Raises:
            CameraPermissionError: 사용 가능한 카메라가 없거나 열기 실패
            ImageReadError: 스트림은 열렸지만 프레임을 읽지 못함
        """
        # 탐지 결과가 없으면 (새 프로세스) 먼저 탐지
        if not self._probed:
            await self.probe()

        facing = facing_mode if facing_mode is not None else self.default_facing
        if facing is None or not self.is_available(facing):
            raise CameraPermissionError("Camera access is unavailable on this device.")

        return await asyncio.to_thread(self._read_frame, facing)

    def _read_frame(self, facing_mode: FacingMode) -> np.ndarray:
        try:
            stream = self._backend.open(facing_mode)
        except CameraUnavailableError as e:
            raise CameraPermissionError(str(e)) from e

        try:
            return stream.read()
        except CameraUnavailableError as e:
            raise ImageReadError(f"Failed to capture camera frame: {e}") from e
        finally:
            stream.release()
