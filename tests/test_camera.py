"""Tests for the frame capture source."""

import asyncio

import pytest
from PIL import Image

from arauditor.vision.camera import (
    CameraError,
    CameraPermissionDenied,
    SensorStatus,
    load_frame_from_file,
)

from conftest import make_camera


def test_start_activates_and_reports_dimensions():
    camera = make_camera()
    asyncio.run(camera.start())

    assert camera.status is SensorStatus.ACTIVE
    assert camera.is_active
    assert (camera.width, camera.height) == (640, 480)


def test_denied_stream_raises_and_marks_denied():
    camera = make_camera(opened=False)

    with pytest.raises(CameraPermissionDenied):
        asyncio.run(camera.start())
    assert camera.status is SensorStatus.DENIED
    assert not camera.is_active


def test_snapshot_returns_jpeg_bytes():
    async def scenario():
        camera = make_camera()
        await camera.start()
        return await camera.snapshot()

    frame = asyncio.run(scenario())
    assert frame.data[:2] == b"\xff\xd8"
    assert (frame.width, frame.height) == (640, 480)
    assert frame.captured_at > 0


def test_snapshot_requires_active_camera():
    camera = make_camera()
    with pytest.raises(CameraError):
        asyncio.run(camera.snapshot())


def test_stop_releases_device():
    async def scenario():
        camera = make_camera()
        await camera.start()
        capture = camera._capture
        await camera.stop()
        return camera, capture

    camera, capture = asyncio.run(scenario())
    assert capture.released is True
    assert camera.status is SensorStatus.OFFLINE
    with pytest.raises(CameraError):
        asyncio.run(camera.snapshot())


def test_load_frame_from_file_reencodes_as_jpeg(tmp_path):
    path = tmp_path / "entrance.png"
    Image.new("RGBA", (320, 200), (120, 80, 40, 255)).save(path)

    frame = load_frame_from_file(str(path))

    assert frame.data[:2] == b"\xff\xd8"
    assert (frame.width, frame.height) == (320, 200)
