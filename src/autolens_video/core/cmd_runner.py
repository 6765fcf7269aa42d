import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from ..ffmpeg_utils import format_command
from ..logger import logger
from ..subprocess_manager import DEFAULT_GRACE_SECONDS, track_process, untrack_process


@dataclass
class CommandResult:
    """Exit status and decoded output of a finished command."""
    cmd: List[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class CommandError(Exception):
    """Non-zero exit from an external command; output is kept for logging."""

    def __init__(self, result: CommandResult):
        self.result = result
        self.cmd = result.cmd
        self.returncode = result.returncode
        self.stdout = result.stdout
        self.stderr = result.stderr
        super().__init__(f"{Path(result.cmd[0]).name} exited with {result.returncode}")


def _decode(data: Optional[bytes]) -> str:
    return (data or b"").decode("utf-8", errors="replace")


async def _stop(process, grace: float) -> None:
    """SIGTERM, await exit for `grace` seconds, then SIGKILL."""
    if process.returncode is not None:
        return
    try:
        process.terminate()
    except ProcessLookupError:
        return
    try:
        await asyncio.wait_for(process.wait(), grace)
    except asyncio.TimeoutError:
        logger.warning(f"PID {process.pid} ignored SIGTERM for {grace:g}s, killing")
        try:
            process.kill()
        except ProcessLookupError:
            return
        await process.wait()


async def run_command(
    cmd: Sequence[Union[str, Path]],
    cwd: Optional[Union[str, Path]] = None,
    env: Optional[Dict[str, str]] = None,
    check: bool = True,
    log_output: bool = False,
) -> CommandResult:
    """
    Launch `cmd`, wait for it and return its captured output.

    stdin is closed, stdout and stderr are buffered in memory by
    communicate(). The process handle is registered with the subprocess
    manager for as long as it runs. There is no timeout; cancelling the
    coroutine terminates the child.

    Args:
        cmd: argv; Path parts are converted to str
        env: extra variables layered over os.environ
        check: raise CommandError on a non-zero exit
        log_output: echo stdout/stderr to the DEBUG log

    Raises:
        CommandError: non-zero exit and check=True
        OSError: the binary could not be started
    """
    argv = [str(part) for part in cmd]
    logger.debug(f"$ {format_command(argv)}")

    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            cwd=cwd,
            env={**os.environ, **(env or {})},
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.error(f"Could not start {argv[0]}: {e}")
        raise

    track_process(process, label=Path(argv[0]).name)
    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        await _stop(process, DEFAULT_GRACE_SECONDS)
        raise
    finally:
        untrack_process(process)

    result = CommandResult(argv, process.returncode, _decode(stdout), _decode(stderr))

    if log_output:
        for stream, text in (("stdout", result.stdout), ("stderr", result.stderr)):
            if text:
                logger.debug(f"{argv[0]} {stream}: {text}")

    if check and not result.ok:
        raise CommandError(result)
    return result
