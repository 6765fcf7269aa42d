import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from autolens_video.config import reload_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path):
    """Fresh settings per test, with scratch paths under tmp_path."""
    with patch.dict(os.environ, {
        "AUTOLENS_TEMP_DIR": str(tmp_path / "tmp"),
        "AUTOLENS_OUTPUT_DIR": str(tmp_path / "output"),
    }):
        yield reload_settings()
    reload_settings()


def make_process(returncode=0, stdout=b"", stderr=b"", pid=4242):
    """Stand-in for an asyncio process handle."""
    proc = MagicMock()
    proc.pid = pid
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout, stderr))
    return proc


@pytest.fixture
def mock_exec():
    """Patch asyncio.create_subprocess_exec; set .return_value to a make_process()."""
    with patch("asyncio.create_subprocess_exec", new_callable=AsyncMock) as mocked:
        mocked.return_value = make_process()
        yield mocked


def launched_command(mocked):
    """argv of the most recent launch."""
    return list(mocked.call_args.args)
