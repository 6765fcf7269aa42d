"""
Argument-list builders for ffmpeg and ffprobe.

Every process the pipeline starts is assembled here, so the binary comes
from settings and the overwrite flag always lands after the output path.
"""

import shlex
from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence

from .config import get_settings
from .ffmpeg_config import STANDARD_AUDIO_CODEC, STANDARD_CODEC


def build_ffmpeg_cmd(
    args: Sequence[str],
    *,
    overwrite: bool = True,
    hide_banner: bool = False,
    loglevel: Optional[str] = None,
    binary: Optional[str] = None,
) -> List[str]:
    """
    [ffmpeg, global flags..., *args, -y]

    Global flags already present in `args` are not repeated, and `-y` is
    skipped when the caller chose -y or -n itself.
    """
    head = [binary or get_settings().binaries.ffmpeg_bin]
    if hide_banner and "-hide_banner" not in args:
        head.append("-hide_banner")
    if loglevel and "-loglevel" not in args:
        head += ["-loglevel", loglevel]

    tail = ["-y"] if overwrite and not {"-y", "-n"} & set(args) else []
    return head + list(args) + tail


def build_ffprobe_cmd(
    args: Sequence[str],
    *,
    verbosity: Optional[str] = None,
    binary: Optional[str] = None,
) -> List[str]:
    head = [binary or get_settings().binaries.ffprobe_bin]
    if verbosity and "-v" not in args:
        head += ["-v", verbosity]
    return head + list(args)


def format_command(cmd: Iterable[object]) -> str:
    """Shell-quoted one-liner for logs and error details."""
    return shlex.join(str(part) for part in cmd)


@dataclass
class VideoEncodingParams:
    """
    Codec and bitrate flags for a platform re-encode.

        VideoEncodingParams(bitrate="4000k").to_args()
        # -> ["-b:v", "4000k", "-c:v", "libx264", "-c:a", "aac"]
    """
    codec: str = STANDARD_CODEC
    audio_codec: Optional[str] = STANDARD_AUDIO_CODEC
    bitrate: Optional[str] = None
    pix_fmt: Optional[str] = None

    def to_args(self) -> List[str]:
        pairs = [
            ("-b:v", self.bitrate),
            ("-c:v", self.codec),
            ("-c:a", self.audio_codec),
            ("-pix_fmt", self.pix_fmt),
        ]
        return [part for flag, value in pairs if value for part in (flag, value)]


def build_filter_chain(filters: Iterable[str], separator: str = ",") -> str:
    """Join filter expressions, dropping blanks: ["scale=1:1", "", "setsar=1"] -> "scale=1:1,setsar=1"."""
    return separator.join(f for f in filters if f and f.strip())
