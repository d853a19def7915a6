from fastapi import APIRouter

from lingualens.schemas.session import CameraCapabilities
from lingualens.services.camera import get_camera_probe

router = APIRouter(prefix="/camera", tags=["camera"])


@router.get("", response_model=CameraCapabilities)
async def read_camera() -> CameraCapabilities:
    return get_camera_probe().capabilities


@router.post("/probe", response_model=CameraCapabilities)
async def probe_camera() -> CameraCapabilities:
    """전면/후면 카메라 재탐지"""
    return await get_camera_probe().probe()
