"""
Thin wrapper around the 'exiftool' command line utility.
Must be installed and on the system PATH.
"""
import logging
import subprocess
from typing import List, Optional

from .. import config


def run_exiftool(args: List[str], timeout: Optional[float] = None) -> subprocess.CompletedProcess:
    """
    Runs exiftool with the given arguments and captures its output.

    Does not check the exit status; callers decide what a failure means.
    Raises FileNotFoundError if the binary is missing and
    subprocess.TimeoutExpired if it hangs.
    """
    cmd = [config.EXIFTOOL_BIN] + args
    logging.debug(f"Running: {' '.join(cmd)}")
    return subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        check=False,
        stdin=subprocess.DEVNULL,
        timeout=timeout if timeout is not None else config.EXIFTOOL_TIMEOUT_SEC,
    )


def exiftool_version() -> Optional[str]:
    """Returns the installed exiftool version, or None if it cannot be run."""
    try:
        result = run_exiftool(["-ver"], timeout=30)
    except (OSError, subprocess.TimeoutExpired):
        return None
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None
