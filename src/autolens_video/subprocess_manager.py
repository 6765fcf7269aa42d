"""
Registry of running ffmpeg/ffprobe children.

run_command registers every process it launches and forgets it on exit.
Nothing here imposes a deadline: a caller that abandons an operation (an
outer asyncio.wait_for, Ctrl-C in the CLI) calls cleanup_all_subprocesses()
to reap whatever is still running.

Usage:
    from autolens_video.subprocess_manager import cleanup_all_subprocesses

    try:
        await asyncio.wait_for(compiler.compile(request), timeout=600)
    except asyncio.TimeoutError:
        cleanup_all_subprocesses()
"""

import os
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

import psutil

from .logger import logger

# Seconds a terminated child gets before it is killed, across the whole sweep
DEFAULT_GRACE_SECONDS = float(os.environ.get("SUBPROCESS_GRACE_SECONDS", "10"))

# Orphans are only killed when they are one of our transcoder binaries
TRANSCODER_NAMES = ("ffmpeg", "ffprobe")


@dataclass
class TrackedProcess:
    proc: Any
    label: str
    started_at: float = field(default_factory=time.monotonic)


_live: Dict[int, TrackedProcess] = {}


def track_process(proc: Any, label: str = "") -> None:
    _live[id(proc)] = TrackedProcess(proc, label or "subprocess")
    logger.debug(f"Tracking {label or 'subprocess'} (PID {proc.pid})")


def untrack_process(proc: Any) -> None:
    _live.pop(id(proc), None)


def active_process_count() -> int:
    return len(_live)


def active_processes() -> List[Tuple[int, str, float]]:
    """(pid, label, seconds running) for every tracked child."""
    now = time.monotonic()
    return [(t.proc.pid, t.label, now - t.started_at) for t in _live.values()]


def terminate_process(proc: Any, grace: float = DEFAULT_GRACE_SECONDS) -> bool:
    """
    SIGTERM, wait up to `grace` seconds, then SIGKILL.

    Returns:
        False only when the child had to be killed
    """
    if proc.returncode is not None:
        return True

    try:
        proc.terminate()
    except ProcessLookupError:
        return True

    try:
        psutil.Process(proc.pid).wait(timeout=grace)
        return True
    except psutil.NoSuchProcess:
        return True
    except psutil.TimeoutExpired:
        pass

    logger.warning(f"PID {proc.pid} ignored SIGTERM for {grace:g}s, killing")
    try:
        proc.kill()
    except ProcessLookupError:
        pass
    return False


def _kill_orphaned_transcoders() -> None:
    try:
        children = psutil.Process(os.getpid()).children(recursive=True)
    except psutil.Error as e:
        logger.warning(f"Could not list child processes: {e}")
        return

    for child in children:
        try:
            if child.status() == psutil.STATUS_ZOMBIE:
                continue
            if any(name in child.name() for name in TRANSCODER_NAMES):
                logger.warning(f"Killing orphaned {child.name()} (PID {child.pid})")
                child.kill()
        except psutil.Error as e:
            logger.warning(f"Could not kill PID {child.pid}: {e}")


def cleanup_all_subprocesses(grace: float = DEFAULT_GRACE_SECONDS) -> int:
    """
    Terminate every tracked child, sharing one grace budget, then kill
    untracked transcoder children of this process.

    Returns:
        Number of tracked children that exited without SIGKILL
    """
    if _live:
        logger.info(f"Stopping {len(_live)} running transcoder process(es)")
    for pid, label, age in active_processes():
        logger.debug(f"  {label} (PID {pid}) running for {age:.1f}s")

    deadline = time.monotonic() + grace
    exited = 0

    for key, tracked in list(_live.items()):
        remaining = max(1.0, deadline - time.monotonic())
        if terminate_process(tracked.proc, grace=remaining):
            exited += 1
        _live.pop(key, None)

    _kill_orphaned_transcoders()
    return exited
