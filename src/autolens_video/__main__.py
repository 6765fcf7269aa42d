"""python -m autolens_video"""

import signal

from autolens_video.cli import cli

if __name__ == "__main__":
    # Exit quietly when piped into head/less and the reader goes away
    if hasattr(signal, "SIGPIPE"):
        signal.signal(signal.SIGPIPE, signal.SIG_DFL)
    cli(prog_name="autolens-video")
