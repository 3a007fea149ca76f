import time
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Set

from runjob.config import MergedSettings, effective_settings
from runjob.supervisor import persistence, process_utils, shutdown
from runjob.supervisor.process_utils import format_pids

log = logging.getLogger(__name__)


class JobSupervisor:
    """
    Manages the lifecycle of a single long-running worker process.

    Liveness is always read from the OS process table through the worker's
    command-line signature. The PID file and the captured output log are
    advisory records owned by the supervisor; every operation is idempotent
    and safe to repeat.
    """

    def __init__(self, config: Optional[MergedSettings] = None) -> None:
        """Initializes the JobSupervisor with the given or the effective settings."""
        self.config = config or effective_settings
        self.pid_path = Path(self.config.PID_FILE_PATH)
        self.log_path = Path(self.config.LOG_FILE_PATH)
        self.signature: str = self.config.WORKER_SIGNATURE

    def locate(self) -> Set[int]:
        """Returns the set of PIDs currently matching the worker signature."""
        return process_utils.locate(self.signature)

    def is_running(self) -> bool:
        """Returns True if any process matches the worker signature."""
        return process_utils.is_running(self.signature)

    def start(self) -> bool:
        """
        Starts the worker unless it is already running.

        :return: True if a new worker was launched, False if one was already
                 running or the launch failed.
        """
        running = self.locate()
        if running:
            log.info("Job is already running.")
            log.info(f"Running PIDs: {format_pids(running)}")
            return False

        log.info("Starting job...")
        # Start from a clean slate so a previous run never leaks into this one.
        persistence.cleanup_records(self.config)

        try:
            proc = process_utils.launch_worker(self.config)
        except OSError as e:
            log.error(f"Failed to start job: {e}")
            persistence.cleanup_records(self.config)
            return False

        persistence.write_pid_file(self.pid_path, proc.pid)
        time.sleep(self.config.STARTUP_SETTLE_DELAY)

        persisted_pid = persistence.read_pid_file(self.pid_path)
        if persisted_pid is not None:
            log.info(f"Job started with parent PID {persisted_pid}.")
        else:
            log.warning("Job started but PID file was not created.")
        log.info(f"View logs with: tail -f {self.log_path}")
        return True

    def stop(self) -> bool:
        """
        Stops every process matching the worker signature, escalating to SIGKILL.

        :return: True if the job is confirmed stopped and the records removed,
                 False if some processes survived.
        """
        pids = self.locate()
        if not pids:
            log.info("Job is not running.")
            persistence.cleanup_records(self.config)
            return True

        log.info("Terminating all processes related to the job...")
        log.info(f"Found PIDs: {format_pids(pids)}")
        survivors = shutdown.escalating_shutdown(
            self.signature,
            pids,
            graceful_timeout=self.config.GRACEFUL_SHUTDOWN_TIMEOUT,
            kill_timeout=self.config.KILL_WAIT_TIMEOUT,
        )

        if not survivors:
            persistence.cleanup_records(self.config)
            log.info("Job terminated and cleaned up.")
            return True

        log.warning("Failed to terminate all processes. Manual intervention may be required.")
        log.warning(f"Remaining PIDs: {format_pids(survivors)}")
        return False

    def restart(self) -> bool:
        """Stops the job, waits for the cooldown and starts it again."""
        if not self.stop():
            log.error("Restart aborted: the running job could not be stopped.")
            return False
        time.sleep(self.config.CYCLE_COOLDOWN)
        return self.start()

    def status(self) -> Dict[str, Any]:
        """
        Prints a status report of the job and its captured output.
        Never modifies the PID file or the log file.

        :return: A dict with 'running', 'pids', 'log_state' and 'log_tail'.
        """
        after_header, before_logs, after_logs = self.config.STATUS_PACING_DELAYS

        print("--- Job Status Report ---")
        time.sleep(after_header)

        pids = self.locate()
        if pids:
            print("Status: Job is currently running.")
            print(f"Running PIDs: {format_pids(pids)}")
        else:
            print("Status: Job is not running.")

        time.sleep(before_logs)
        print("--- Log File Report ---")
        tail_lines = self.config.STATUS_TAIL_LINES
        log_state, log_tail = persistence.read_log_tail(self.log_path, tail_lines)
        if log_state == persistence.LOG_CONTENT:
            print(f"Log file exists and contains content. Displaying last {tail_lines} lines:")
            for line in log_tail:
                print(line)
        elif log_state == persistence.LOG_EMPTY:
            print("Log file exists but is currently empty.")
        else:
            print("No log file found. The job has likely not been started yet.")

        time.sleep(after_logs)
        print("-" * 25)

        return {
            "running": bool(pids),
            "pids": sorted(pids),
            "log_state": log_state,
            "log_tail": log_tail,
        }

    def cycle(self, max_cycles: Optional[int] = None) -> int:
        """
        Repeats start, run duration, stop, cooldown.

        Runs forever unless `max_cycles` is given. A KeyboardInterrupt ends the
        loop at whichever wait it arrives in; the worker is left for the next
        start or stop invocation.

        :param max_cycles: Optional number of cycles after which to return.
        :return: The number of completed cycles.
        """
        completed = 0
        try:
            while max_cycles is None or completed < max_cycles:
                log.info(f"--- Starting new cycle (#{completed + 1}) ---")
                self.start()
                log.info(f"Job is running. Waiting for {self.config.CYCLE_RUN_DURATION} seconds...")
                time.sleep(self.config.CYCLE_RUN_DURATION)
                self.stop()
                completed += 1
                log.info(f"Cycle complete. Waiting for {self.config.CYCLE_COOLDOWN} seconds before next cycle...")
                time.sleep(self.config.CYCLE_COOLDOWN)
        except KeyboardInterrupt:
            log.info("Cycle loop interrupted by user.")
        return completed
