"""
AutoLens Video Exception Hierarchy

Every exception carries a short user-facing message plus optional technical
details (ffmpeg stderr, the failing command) that are meant for logs only.

Usage:
    from autolens_video.exceptions import CompilationError

    try:
        await compiler.compile(request)
    except CompilationError as e:
        logger.error(e.user_message)
        logger.debug(e.technical_details)
"""

from typing import Optional


class VideoPipelineError(Exception):
    """Base exception for all AutoLens Video errors."""

    def __init__(
        self,
        user_message: str,
        technical_details: Optional[str] = None,
        suggestion: Optional[str] = None
    ):
        """
        Args:
            user_message: Human-readable error message
            technical_details: Technical debug info (not shown to users)
            suggestion: How to fix or work around the error
        """
        self.user_message = user_message
        self.technical_details = technical_details or ""
        self.suggestion = suggestion or ""

        full_msg = user_message
        if suggestion:
            full_msg += f"\nTry: {suggestion}"

        super().__init__(full_msg)

    def __str__(self) -> str:
        return self.user_message


# =============================================================================
# Configuration / precondition errors
# =============================================================================

class ConfigurationError(VideoPipelineError):
    """Bad input detected before any external process was started."""
    pass


class InvalidRequestError(ConfigurationError):
    """A compilation request violates a precondition."""
    pass


class TransitionNotFoundError(ConfigurationError):
    """A transition id could not be resolved where one is required."""

    def __init__(self, transition_id: str):
        self.transition_id = transition_id
        super().__init__(
            user_message=f"Unknown transition: {transition_id}",
            suggestion="Run `autolens-video transitions` to list valid ids",
        )


class CatalogError(ConfigurationError):
    """A static catalog file is missing or malformed."""
    pass


# =============================================================================
# External process errors
# =============================================================================

class FFmpegError(VideoPipelineError):
    """An ffmpeg/ffprobe invocation failed."""

    def __init__(
        self,
        user_message: str,
        command: Optional[str] = None,
        stderr: Optional[str] = None,
    ):
        self.command = command
        self.stderr = stderr
        details = []
        if command:
            details.append(f"Command: {command}")
        if stderr:
            details.append(f"Stderr: {stderr}")
        super().__init__(
            user_message=user_message,
            technical_details="\n".join(details),
            suggestion="Verify FFmpeg is installed: ffmpeg -version",
        )


class CompilationError(FFmpegError):
    """Clip compilation failed."""

    def __init__(self, command: Optional[str] = None, stderr: Optional[str] = None):
        super().__init__("Failed to compile video", command=command, stderr=stderr)


class PlatformOptimizationError(FFmpegError):
    """Re-encoding for a target platform failed."""

    def __init__(self, platform: str, command: Optional[str] = None, stderr: Optional[str] = None):
        self.platform = platform
        super().__init__(f"Failed to optimize video for {platform}", command=command, stderr=stderr)


class VideoInfoError(FFmpegError):
    """Probing a file failed or returned unusable output."""

    def __init__(self, command: Optional[str] = None, stderr: Optional[str] = None):
        super().__init__("Failed to extract video information", command=command, stderr=stderr)


class WatermarkError(FFmpegError):
    """Watermark overlay failed."""

    def __init__(self, command: Optional[str] = None, stderr: Optional[str] = None):
        super().__init__("Failed to add watermark", command=command, stderr=stderr)


class ThumbnailError(FFmpegError):
    """Thumbnail extraction failed."""

    def __init__(self, command: Optional[str] = None, stderr: Optional[str] = None):
        super().__init__("Failed to generate thumbnail", command=command, stderr=stderr)


class ExportError(FFmpegError):
    """Export to an output format failed."""

    def __init__(self, format_id: str, command: Optional[str] = None, stderr: Optional[str] = None):
        self.format_id = format_id
        super().__init__(f"Failed to export video as {format_id}", command=command, stderr=stderr)
