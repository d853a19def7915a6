"""CameraProbe 테스트"""

import asyncio
import threading

import numpy as np
import pytest

from lingualens.schemas.session import FacingMode
from lingualens.services.camera import CameraPermissionError, CameraProbe
from lingualens.services.image_source import ImageReadError
from tests.conftest import FakeCameraBackend, FakeStream, make_frame


class ExplodingFrontBackend(FakeCameraBackend):
    """전면 카메라 열기 시 예상 못한 예외"""

    def open(self, facing_mode: FacingMode) -> FakeStream:
        if facing_mode == "user":
            self.attempts.append(facing_mode)
            raise RuntimeError("driver crashed")
        return super().open(facing_mode)


class GatedBackend(FakeCameraBackend):
    """지정한 방향의 첫 열기를 unblock 될 때까지 막는 백엔드"""

    def __init__(self, available: set[FacingMode], gate: FacingMode) -> None:
        super().__init__(available=available)
        self.gate = gate
        self.gated = False
        self.started = threading.Event()
        self.unblock = threading.Event()

    def open(self, facing_mode: FacingMode) -> FakeStream:
        if facing_mode == self.gate and not self.gated:
            self.gated = True
            self.started.set()
            self.unblock.wait(timeout=5)
        return super().open(facing_mode)


class CheckingRecorder(FakeCameraBackend):
    def __init__(self, available: set[FacingMode]) -> None:
        super().__init__(available=available)
        self.probe: CameraProbe | None = None
        self.checking_during_open: list[bool] = []

    def open(self, facing_mode: FacingMode) -> FakeStream:
        assert self.probe is not None
        self.checking_during_open.append(self.probe.checking)
        return super().open(facing_mode)


class TestProbe:
    async def test_both_available_defaults_to_back(self) -> None:
        backend = FakeCameraBackend(available={"user", "environment"})
        probe = CameraProbe(backend)

        capabilities = await probe.probe()

        assert capabilities.has_front is True
        assert capabilities.has_back is True
        assert capabilities.default_facing == "environment"
        assert capabilities.can_rotate is True
        assert capabilities.checking is False

    async def test_front_only_defaults_to_front(self) -> None:
        probe = CameraProbe(FakeCameraBackend(available={"user"}))

        capabilities = await probe.probe()

        assert capabilities.default_facing == "user"
        assert capabilities.can_rotate is False

    async def test_back_only_defaults_to_back(self) -> None:
        probe = CameraProbe(FakeCameraBackend(available={"environment"}))

        capabilities = await probe.probe()

        assert capabilities.default_facing == "environment"

    async def test_none_available_has_no_preference(self) -> None:
        probe = CameraProbe(FakeCameraBackend(available=set()))

        capabilities = await probe.probe()

        assert capabilities.has_front is False
        assert capabilities.has_back is False
        assert capabilities.default_facing is None
        assert capabilities.checking is False
        assert probe.probed is True

    async def test_each_facing_mode_probed_independently(self) -> None:
        backend = ExplodingFrontBackend(available={"user", "environment"})
        probe = CameraProbe(backend)

        capabilities = await probe.probe()

        assert backend.attempts == ["user", "environment"]
        assert capabilities.has_front is False
        assert capabilities.has_back is True

    async def test_streams_released_after_probe(self) -> None:
        backend = FakeCameraBackend(available={"user", "environment"})

        await CameraProbe(backend).probe()

        assert backend.opened == 2
        assert backend.released == 2

    async def test_checking_only_while_running(self) -> None:
        backend = CheckingRecorder(available={"user"})
        probe = CameraProbe(backend)
        backend.probe = probe

        assert probe.checking is False
        await probe.probe()

        assert backend.checking_during_open == [True, True]
        assert probe.checking is False

    async def test_probe_before_run_reports_nothing(self) -> None:
        probe = CameraProbe(FakeCameraBackend(available={"user", "environment"}))

        assert probe.probed is False
        assert probe.capabilities.default_facing is None


class TestCapture:
    async def test_capture_returns_frame_and_releases(self) -> None:
        frame = make_frame()
        backend = FakeCameraBackend(available={"user", "environment"}, frame=frame)
        probe = CameraProbe(backend)
        await probe.probe()

        result = await probe.capture("user")

        assert np.array_equal(result, frame)
        assert backend.attempts[-1] == "user"
        assert backend.released == backend.opened

    async def test_capture_uses_default_facing(self) -> None:
        backend = FakeCameraBackend(available={"user"}, frame=make_frame())
        probe = CameraProbe(backend)
        await probe.probe()

        await probe.capture()

        assert backend.attempts[-1] == "user"

    async def test_capture_without_camera_raises(self) -> None:
        probe = CameraProbe(FakeCameraBackend(available=set()))
        await probe.probe()

        with pytest.raises(CameraPermissionError):
            await probe.capture()

    async def test_capture_unprobed_facing_raises(self) -> None:
        backend = FakeCameraBackend(available={"environment"}, frame=make_frame())
        probe = CameraProbe(backend)
        await probe.probe()

        with pytest.raises(CameraPermissionError):
            await probe.capture("user")

    async def test_capture_open_failure_is_permission_error(self) -> None:
        backend = FakeCameraBackend(available={"environment"}, frame=make_frame())
        probe = CameraProbe(backend)
        await probe.probe()
        backend.available = set()

        with pytest.raises(CameraPermissionError):
            await probe.capture("environment")

    async def test_capture_read_failure_releases_stream(self) -> None:
        backend = FakeCameraBackend(available={"environment"}, frame=None)
        probe = CameraProbe(backend)
        await probe.probe()

        with pytest.raises(ImageReadError):
            await probe.capture("environment")

        assert backend.released == backend.opened


class TestOverlappingProbe:
    async def test_second_probe_joins_running_probe(self) -> None:
        backend = GatedBackend(available={"user", "environment"}, gate="user")
        probe = CameraProbe(backend)

        first = asyncio.create_task(probe.probe())
        await asyncio.to_thread(backend.started.wait, 5)
        second = asyncio.create_task(probe.probe())
        await asyncio.sleep(0.05)

        assert not second.done()
        assert probe.checking is True

        backend.unblock.set()
        first_result, second_result = await asyncio.gather(first, second)

        assert first_result == second_result
        assert backend.attempts == ["user", "environment"]
        assert probe.checking is False

    async def test_reprobe_keeps_previous_result_until_done(self) -> None:
        backend = GatedBackend(available={"user", "environment"}, gate="environment")
        backend.gated = True
        probe = CameraProbe(backend)
        await probe.probe()

        backend.available = {"environment"}
        backend.gated = False
        backend.started.clear()
        running = asyncio.create_task(probe.probe())
        await asyncio.to_thread(backend.started.wait, 5)

        during = probe.capabilities
        assert during.has_front is True
        assert during.has_back is True
        assert during.checking is True

        backend.unblock.set()
        after = await running

        assert after.has_front is False
        assert after.has_back is True
        assert after.checking is False

    async def test_capture_probes_first_when_never_probed(self) -> None:
        backend = FakeCameraBackend(available={"user", "environment"}, frame=make_frame())
        probe = CameraProbe(backend)

        await probe.capture("environment")

        assert probe.probed is True
        assert backend.attempts == ["user", "environment", "environment"]
