"""Package version.

Release builds may stamp the commit into BUILD_COMMIT; it is appended as a
PEP 440 local segment ("0.3.0+1a2b3c4d"). Packaging only sees BASE_VERSION.
"""

import os

BASE_VERSION = "0.3.0"


def build_commit() -> str:
    """First 8 characters of BUILD_COMMIT, or '' for local checkouts."""
    return os.environ.get("BUILD_COMMIT", "").strip()[:8]


def full_version() -> str:
    commit = build_commit()
    return f"{BASE_VERSION}+{commit}" if commit else BASE_VERSION


__version__ = BASE_VERSION

VERSION = full_version()
