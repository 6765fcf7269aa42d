"""
Tests for post-processing operations.
"""

import asyncio
import json

import pytest

from conftest import launched_command, make_process

from autolens_video.exceptions import (
    ExportError,
    InvalidRequestError,
    PlatformOptimizationError,
    ThumbnailError,
    VideoInfoError,
    WatermarkError,
)
from autolens_video.post_processing import (
    PLATFORM_SETTINGS,
    Platform,
    PostProcessor,
    WatermarkPosition,
    derive_output_path,
    parse_probe_output,
)

PROBE_JSON = json.dumps({
    "streams": [
        {"codec_type": "audio", "sample_rate": "48000"},
        {"codec_type": "video", "width": 1080, "height": 1920},
    ],
    "format": {"duration": "29.533", "format_name": "mov,mp4,m4a,3gp,3g2,mj2"},
}).encode()


def _value_after(cmd, flag):
    return cmd[cmd.index(flag) + 1]


@pytest.fixture
def post():
    return PostProcessor()


class TestDeriveOutputPath:

    def test_suffix_before_extension(self):
        assert str(derive_output_path("/videos/car.mp4", "tiktok")) == "/videos/car_tiktok.mp4"

    def test_new_extension(self):
        assert str(derive_output_path("/videos/car.mp4", "thumb", ".jpg")) == "/videos/car_thumb.jpg"


class TestPlatformSettings:

    def test_every_platform_configured(self):
        assert set(PLATFORM_SETTINGS) == set(Platform)

    def test_tiktok(self):
        tiktok = PLATFORM_SETTINGS[Platform.TIKTOK]
        assert tiktok.bitrate == "4000k"
        assert tiktok.max_duration == 60


class TestOptimizeForPlatform:

    def test_tiktok_caps_duration_and_renames(self, post, mock_exec):
        output = asyncio.run(post.optimize_for_platform("/videos/car.mp4", "tiktok"))

        assert output == "/videos/car_tiktok.mp4"
        cmd = launched_command(mock_exec)
        assert _value_after(cmd, "-t") == "60"
        assert _value_after(cmd, "-b:v") == "4000k"
        assert _value_after(cmd, "-vf") == "scale=1080:1920"
        assert cmd[-2:] == ["/videos/car_tiktok.mp4", "-y"]

    def test_platform_name_is_case_insensitive(self, post, mock_exec):
        output = asyncio.run(post.optimize_for_platform("/videos/car.mp4", "YouTube"))
        assert output == "/videos/car_youtube.mp4"
        assert _value_after(launched_command(mock_exec), "-b:v") == "8000k"

    def test_unknown_platform(self, post, mock_exec):
        with pytest.raises(InvalidRequestError):
            asyncio.run(post.optimize_for_platform("/videos/car.mp4", "myspace"))
        mock_exec.assert_not_called()

    def test_failure_is_wrapped(self, post, mock_exec):
        mock_exec.return_value = make_process(returncode=1, stderr=b"boom")
        with pytest.raises(PlatformOptimizationError) as exc_info:
            asyncio.run(post.optimize_for_platform("/videos/car.mp4", "instagram"))
        assert exc_info.value.platform == "instagram"
        assert str(exc_info.value) == "Failed to optimize video for instagram"


class TestExtractInfo:

    def test_parses_probe_output(self, post, mock_exec):
        mock_exec.return_value = make_process(stdout=PROBE_JSON)

        info = asyncio.run(post.extract_info("/videos/car.mp4"))

        assert info.duration_seconds == pytest.approx(29.533)
        assert info.resolution == "1080x1920"
        assert info.container_format.startswith("mov,mp4")

        cmd = launched_command(mock_exec)
        assert cmd[:3] == ["ffprobe", "-v", "quiet"]
        assert "-show_streams" in cmd
        assert cmd[-1] == "/videos/car.mp4"

    def test_probe_failure(self, post, mock_exec):
        mock_exec.return_value = make_process(returncode=1, stderr=b"No such file")
        with pytest.raises(VideoInfoError):
            asyncio.run(post.extract_info("/videos/missing.mp4"))

    def test_unparseable_output(self, post, mock_exec):
        mock_exec.return_value = make_process(stdout=b"not json")
        with pytest.raises(VideoInfoError) as exc_info:
            asyncio.run(post.extract_info("/videos/car.mp4"))
        assert exc_info.value.user_message == "Failed to extract video information"

    def test_no_video_stream(self):
        with pytest.raises(ValueError):
            parse_probe_output(json.dumps({"streams": [], "format": {"duration": "1"}}))

    def test_to_dict(self):
        info = parse_probe_output(PROBE_JSON.decode())
        assert set(info.to_dict()) == {"duration", "resolution", "format"}


class TestWatermark:

    def test_bottom_right_offset(self, post):
        graph = post.build_watermark_filter("bottom-right")
        assert graph == "[1:v]scale=100:50[watermark];[0:v][watermark]overlay=W-w-10:H-h-10"

    @pytest.mark.parametrize("position,offset", [
        (WatermarkPosition.TOP_LEFT, "overlay=10:10"),
        (WatermarkPosition.TOP_RIGHT, "overlay=W-w-10:10"),
        (WatermarkPosition.BOTTOM_LEFT, "overlay=10:H-h-10"),
    ])
    def test_corner_offsets(self, post, position, offset):
        assert post.build_watermark_filter(position).endswith(offset)

    def test_add_watermark_copies_audio(self, post, mock_exec):
        output = asyncio.run(post.add_watermark("/videos/car.mp4", "/assets/logo.png"))

        assert output == "/videos/car_watermarked.mp4"
        cmd = launched_command(mock_exec)
        assert _value_after(cmd, "-c:a") == "copy"
        assert "overlay=W-w-10:H-h-10" in _value_after(cmd, "-filter_complex")

    def test_unknown_position(self, post, mock_exec):
        with pytest.raises(InvalidRequestError):
            asyncio.run(post.add_watermark("/videos/car.mp4", "/assets/logo.png", "center"))

    def test_failure_is_wrapped(self, post, mock_exec):
        mock_exec.return_value = make_process(returncode=1)
        with pytest.raises(WatermarkError):
            asyncio.run(post.add_watermark("/videos/car.mp4", "/assets/logo.png"))


class TestThumbnail:

    def test_default_offset(self, post, mock_exec):
        output = asyncio.run(post.generate_thumbnail("/videos/car.mp4"))

        assert output == "/videos/car_thumb.jpg"
        cmd = launched_command(mock_exec)
        assert _value_after(cmd, "-ss") == "5"
        assert _value_after(cmd, "-vframes") == "1"

    def test_custom_offset(self, post, mock_exec):
        asyncio.run(post.generate_thumbnail("/videos/car.mp4", 2.5))
        assert _value_after(launched_command(mock_exec), "-ss") == "2.5"

    def test_failure_is_wrapped(self, post, mock_exec):
        mock_exec.return_value = make_process(returncode=1)
        with pytest.raises(ThumbnailError):
            asyncio.run(post.generate_thumbnail("/videos/car.mp4"))


class TestExport:

    def test_export_uses_format_and_recommended_quality(self, post, mock_exec):
        output = asyncio.run(post.export_for_format("/videos/car.mp4", "instagram_reels"))

        assert output == "/videos/car_instagram_reels.mp4"
        cmd = launched_command(mock_exec)
        assert _value_after(cmd, "-crf") == "28"
        assert _value_after(cmd, "-t") == "90"
        assert _value_after(cmd, "-tune") == "film"

    def test_unknown_format(self, post, mock_exec):
        with pytest.raises(InvalidRequestError):
            asyncio.run(post.export_for_format("/videos/car.mp4", "vine"))

    def test_unknown_quality(self, post, mock_exec):
        with pytest.raises(InvalidRequestError):
            asyncio.run(post.export_for_format("/videos/car.mp4", "tiktok", "lossless"))

    def test_failure_is_wrapped(self, post, mock_exec):
        mock_exec.return_value = make_process(returncode=1)
        with pytest.raises(ExportError):
            asyncio.run(post.export_for_format("/videos/car.mp4", "tiktok"))


class TestAvailabilityAndCleanup:

    def test_ffmpeg_available(self, post, mock_exec):
        assert asyncio.run(post.check_ffmpeg_availability()) is True
        assert launched_command(mock_exec) == ["ffmpeg", "-version"]

    def test_ffmpeg_nonzero_exit(self, post, mock_exec):
        mock_exec.return_value = make_process(returncode=127)
        assert asyncio.run(post.check_ffmpeg_availability()) is False

    def test_ffmpeg_missing(self, post, mock_exec):
        mock_exec.side_effect = FileNotFoundError("ffmpeg")
        assert asyncio.run(post.check_ffmpeg_availability()) is False

    def test_cleanup_continues_after_failure(self, post, tmp_path):
        first = tmp_path / "a.mp4"
        second = tmp_path / "b.mp4"
        first.write_bytes(b"x")
        second.write_bytes(b"x")

        removed = asyncio.run(post.cleanup([first, tmp_path / "missing.mp4", second]))

        assert removed == 2
        assert not first.exists()
        assert not second.exists()
