import os
import sys
import psutil
import logging
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Set

if TYPE_CHECKING:
    from runjob.config import MergedSettings

log = logging.getLogger(__name__)


#* --- Process Discovery ---
def locate(signature: str) -> Set[int]:
    """
    Finds the PIDs of all processes whose command line contains the worker signature.

    The process table is the only authority on whether the job is running; PID
    files are never consulted here. The calling process and zombies are excluded.
    Enumeration failures are treated as "no matches".

    :param signature: Command-line fragment identifying the worker (e.g. 'python3 website.py').
    :return: The set of matching PIDs, empty when nothing matches.
    """
    own_pid = os.getpid()
    matches: Set[int] = set()
    try:
        for proc in psutil.process_iter(["pid", "cmdline", "status"]):
            info = proc.info
            if info["pid"] == own_pid or info["status"] == psutil.STATUS_ZOMBIE:
                continue
            cmdline = info["cmdline"]
            if cmdline and signature in " ".join(cmdline):
                matches.add(info["pid"])
    except (psutil.Error, OSError) as e:
        log.debug(f"Process enumeration failed, assuming no matches: {e}")
        return set()
    return matches

def is_running(signature: str) -> bool:
    """Returns True if at least one process matches the worker signature."""
    return bool(locate(signature))

def format_pids(pids: Set[int]) -> str:
    """Renders a PID set as a space separated, sorted string."""
    return " ".join(str(pid) for pid in sorted(pids))

#* --- Worker Arguments ---
def compute_worker_concurrency(reserved: int) -> int:
    """
    Returns the number of cores handed to the worker.

    :param reserved: Cores kept free for the rest of the system.
    :return: Logical core count minus the reservation, never below 1.
    """
    total = psutil.cpu_count(logical=True) or 1
    return max(1, total - reserved)

def get_worker_args(config: "MergedSettings") -> List[str]:
    """Returns the full command line used to launch the worker."""
    concurrency = compute_worker_concurrency(config.RESERVED_CORES)
    return [*config.WORKER_COMMAND, str(concurrency), f"--cache={config.WORKER_CACHE_PATH}"]

#* --- Process Creation ---
def _get_popen_creation_flags() -> Dict[str, Any]:
    """Returns platform-specific flags that detach the worker from the supervisor's session."""
    if sys.platform == "win32":
        return {"creationflags": subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP}
    return {"start_new_session": True}

def launch_worker(config: "MergedSettings") -> subprocess.Popen:
    """
    Launches the worker detached, with stdout and stderr redirected into the log file.

    :param config: The effective supervisor settings.
    :return: The Popen handle of the spawned process.
    :raises OSError: If the executable cannot be started or the log file cannot be opened.
    """
    args = get_worker_args(config)
    log_path = Path(config.LOG_FILE_PATH)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    log.debug(f"Launching worker: {' '.join(args)}")
    # The child keeps its own copy of the descriptor once spawned.
    with log_path.open("wb") as log_stream:
        return subprocess.Popen(
            args,
            stdout=log_stream,
            stderr=subprocess.STDOUT,
            stdin=subprocess.DEVNULL,
            **_get_popen_creation_flags()
        )
