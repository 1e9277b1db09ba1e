"""Tests for ffprobe/ffmpeg helpers and image validation."""

import asyncio
import io

import pytest
from PIL import Image
from unittest.mock import AsyncMock, patch

from dashboard.config.settings import settings
from dashboard.services.exceptions import MediaProbeError, ThumbnailError
from dashboard.services.media import (
    generate_thumbnail,
    probe_duration,
    resolve_upload,
    thumbnail_filename,
    validate_image,
)


def run_result(returncode=0, stdout=b"", stderr=b""):
    return AsyncMock(return_value=(returncode, stdout, stderr))


class TestProbeDuration:
    """Test cases for ffprobe duration parsing."""

    @pytest.mark.asyncio
    async def test_parses_duration(self, tmp_path):
        with patch("dashboard.services.media._run", run_result(stdout=b"12.345000\n")) as mock_run:
            duration = await probe_duration(tmp_path / "clip.mp4")

        assert duration == pytest.approx(12.345)
        cmd = mock_run.await_args.args[0]
        assert cmd[0] == settings.ffprobe_path
        assert "format=duration" in cmd
        assert cmd[-1].endswith("clip.mp4")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("stdout", [b"", b"N/A\n", b"nan\n", b"inf\n", b"-3\n"])
    async def test_unusable_output(self, tmp_path, stdout):
        with patch("dashboard.services.media._run", run_result(stdout=stdout)):
            with pytest.raises(MediaProbeError):
                await probe_duration(tmp_path / "clip.mp4")

    @pytest.mark.asyncio
    async def test_nonzero_exit(self, tmp_path):
        with patch("dashboard.services.media._run", run_result(returncode=1, stderr=b"moov atom not found")):
            with pytest.raises(MediaProbeError, match="moov atom"):
                await probe_duration(tmp_path / "clip.mp4")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [FileNotFoundError("ffprobe"), asyncio.TimeoutError()])
    async def test_tool_missing_or_slow(self, tmp_path, error):
        with patch("dashboard.services.media._run", AsyncMock(side_effect=error)):
            with pytest.raises(MediaProbeError):
                await probe_duration(tmp_path / "clip.mp4")


class TestThumbnails:
    """Test cases for thumbnail generation."""

    def test_thumbnail_filename(self, tmp_path):
        assert thumbnail_filename(tmp_path / "1700-42-clip.mp4", 3.14159) == "1700-42-clip_3.14.jpg"

    @pytest.mark.asyncio
    async def test_generate_thumbnail(self, tmp_path):
        output = tmp_path / "thumbnails" / "clip_1.00.jpg"

        async def fake_run(cmd):
            output.write_bytes(b"jpeg")
            return 0, b"", b""

        with patch("dashboard.services.media._run", side_effect=fake_run) as mock_run:
            url = await generate_thumbnail(tmp_path / "clip.mp4", 1.0, output)

        assert url == "/uploads/thumbnails/clip_1.00.jpg"
        cmd = mock_run.call_args.args[0]
        assert cmd[:2] == [settings.ffmpeg_path, "-y"]
        assert f"scale={settings.thumbnail_width}:{settings.thumbnail_height}" in cmd

    @pytest.mark.asyncio
    async def test_generate_thumbnail_failure(self, tmp_path):
        output = tmp_path / "thumbnails" / "clip_1.00.jpg"

        with patch("dashboard.services.media._run", run_result(returncode=1, stderr=b"bad seek")):
            with pytest.raises(ThumbnailError):
                await generate_thumbnail(tmp_path / "clip.mp4", 1.0, output)

    @pytest.mark.asyncio
    async def test_unwritable_thumbnail_dir(self, tmp_path):
        (tmp_path / "thumbnails").write_bytes(b"not a directory")
        output = tmp_path / "thumbnails" / "clip_1.00.jpg"

        with patch("dashboard.services.media._run", new_callable=AsyncMock) as mock_run:
            with pytest.raises(ThumbnailError, match="Cannot write thumbnails"):
                await generate_thumbnail(tmp_path / "clip.mp4", 1.0, output)

        mock_run.assert_not_called()


class TestImagesAndPaths:
    """Test cases for upload validation and path resolution."""

    def test_validate_image(self, png_bytes):
        assert validate_image(png_bytes) == ("PNG", 16, 16)

    def test_validate_image_rejects_garbage(self):
        with pytest.raises(ValueError, match="Invalid image"):
            validate_image(b"definitely not an image")

    def test_validate_image_rejects_oversized(self):
        buffer = io.BytesIO()
        Image.new("L", (64, 8)).save(buffer, format="PNG")

        with patch.object(settings, "image_max_dimension", 32):
            with pytest.raises(ValueError, match="too large"):
                validate_image(buffer.getvalue())

    def test_validate_image_rejects_unsupported_format(self):
        buffer = io.BytesIO()
        Image.new("RGB", (8, 8)).save(buffer, format="BMP")

        with pytest.raises(ValueError, match="Unsupported format"):
            validate_image(buffer.getvalue())

    def test_resolve_upload(self, upload_dir):
        assert resolve_upload("/uploads/a.jpg") == (upload_dir / "a.jpg").resolve()
        assert resolve_upload("/uploads/thumbnails/a_1.00.jpg") == (upload_dir / "thumbnails" / "a_1.00.jpg").resolve()

    def test_resolve_upload_rejects_outside_paths(self, upload_dir):
        assert resolve_upload("https://example.com/a.jpg") is None
        assert resolve_upload("/uploads/../secrets.txt") is None
        assert resolve_upload("/etc/passwd") is None
