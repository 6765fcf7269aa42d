"""
AutoLens Video Core Module

Contains the process plumbing shared by every ffmpeg/ffprobe call:
- run_command: async subprocess execution with captured output
- CommandResult / CommandError: exit status and failure details
"""

from .cmd_runner import CommandError, CommandResult, run_command

__all__ = [
    "CommandError",
    "CommandResult",
    "run_command",
]
