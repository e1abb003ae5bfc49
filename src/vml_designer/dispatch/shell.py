"""Shell escape hatch used by the Shell command and POST /shell."""

import subprocess

from vml_designer.core import get_logger
from vml_designer.scripting.process import ProcessResult

logger = get_logger(__name__)


def run_shell(command: str, timeout: float = 60.0) -> ProcessResult:
    """Run a command through the system shell with a timeout."""
    try:
        completed = subprocess.run(
            command, shell=True, capture_output=True, text=True, timeout=timeout
        )
    except subprocess.TimeoutExpired as e:
        logger.warning("shell_timed_out", command=command, timeout=timeout)
        stdout = e.stdout.decode("utf-8", "replace") if isinstance(e.stdout, bytes) else (e.stdout or "")
        stderr = e.stderr.decode("utf-8", "replace") if isinstance(e.stderr, bytes) else (e.stderr or "")
        return ProcessResult(stdout, stderr, -1, timed_out=True)
    logger.info("shell_completed", command=command, exit_code=completed.returncode)
    return ProcessResult(completed.stdout, completed.stderr, completed.returncode)
