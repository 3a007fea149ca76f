import time
import psutil
import logging
from typing import Set

from runjob.supervisor.process_utils import format_pids, locate

log = logging.getLogger(__name__)


def _terminate_processes(pids: Set[int]) -> None:
    """Sends SIGTERM to every PID in the set."""
    for pid in sorted(pids):
        try:
            log.info(f"Sending SIGTERM to PID: {pid}")
            psutil.Process(pid).terminate()
        except psutil.NoSuchProcess:
            log.debug(f"Process {pid} no longer exists, skipping termination.")
        except psutil.AccessDenied:
            log.warning(f"Permission denied sending SIGTERM to PID {pid}.")


def _forceful_kill(pids: Set[int]) -> None:
    """Forcefully kills processes that didn't terminate gracefully."""
    if not pids:
        return

    log.warning(f"{len(pids)} processes did not terminate gracefully. Forcefully killing with SIGKILL...")
    for pid in sorted(pids):
        try:
            log.warning(f"Killing stubborn process (PID {pid}).")
            psutil.Process(pid).kill()
        except psutil.NoSuchProcess:
            log.debug(f"Process {pid} no longer exists, skipping forceful kill.")
        except psutil.AccessDenied:
            log.warning(f"Permission denied sending SIGKILL to PID {pid}.")


def _wait_for_exit(pids: Set[int], timeout: float) -> None:
    """
    Blocks for up to `timeout` seconds or until every process has exited.

    Exited children of the supervisor are reaped along the way.
    """
    procs = []
    for pid in pids:
        try:
            procs.append(psutil.Process(pid))
        except psutil.NoSuchProcess:
            continue
    if not procs:
        return
    try:
        psutil.wait_procs(procs, timeout=timeout)
    except psutil.Error as e:
        log.debug(f"Waiting for processes failed, falling back to a plain sleep: {e}")
        time.sleep(timeout)


def escalating_shutdown(signature: str, pids: Set[int], graceful_timeout: float, kill_timeout: float) -> Set[int]:
    """
    Runs the termination ladder: SIGTERM, bounded wait, SIGKILL, bounded wait.

    Survivors of the graceful phase are found again through the process table,
    so descendants that appeared meanwhile are killed as well.

    :param signature: Worker signature used to re-locate survivors.
    :param pids: The PIDs matched before shutdown began.
    :param graceful_timeout: Seconds to wait for voluntary exit after SIGTERM.
    :param kill_timeout: Seconds to wait for the OS after SIGKILL.
    :return: The PIDs still matching the signature after both phases.
    """
    _terminate_processes(pids)
    log.info(f"Sent SIGTERM to processes. Waiting for up to {graceful_timeout} seconds for them to stop...")
    _wait_for_exit(pids, graceful_timeout)

    remaining = locate(signature)
    if remaining:
        log.warning(f"Some processes are still running: {format_pids(remaining)}")
        _forceful_kill(remaining)
        _wait_for_exit(remaining, kill_timeout)

    return locate(signature)
