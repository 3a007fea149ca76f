import logging
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Tuple

if TYPE_CHECKING:
    from runjob.config import MergedSettings

log = logging.getLogger(__name__)

LOG_CONTENT = "content"
LOG_EMPTY = "empty"
LOG_MISSING = "missing"


def write_pid_file(pid_path: Path, pid: int) -> None:
    """
    Atomically writes the spawned worker's PID to the PID file.

    :param pid_path: Location of the PID file.
    :param pid: The OS process identifier to persist.
    """
    temp_pid_path = pid_path.with_name(pid_path.name + ".tmp")
    try:
        pid_path.parent.mkdir(parents=True, exist_ok=True)
        temp_pid_path.write_text(f"{pid}\n")
        temp_pid_path.replace(pid_path)
    except OSError as e:
        log.error(f"Failed to write PID file: {e}", exc_info=True)
    finally:
        temp_pid_path.unlink(missing_ok=True)

def read_pid_file(pid_path: Path) -> Optional[int]:
    """
    Reads the PID file. The value is a hint only and says nothing about liveness.

    :param pid_path: Location of the PID file.
    :return: The persisted PID, or None if the file is missing or malformed.
    """
    try:
        return int(pid_path.read_text().strip())
    except FileNotFoundError:
        return None
    except (ValueError, OSError) as e:
        log.warning(f"Could not read PID file '{pid_path}': {e}")
        return None

def cleanup_records(config: "MergedSettings") -> None:
    """Removes the PID file and the captured output log."""
    for path in (Path(config.PID_FILE_PATH), Path(config.LOG_FILE_PATH)):
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            log.error(f"Failed to remove '{path}': {e}")
    log.debug("Cleaned up PID and log files.")

def read_log_tail(log_path: Path, lines: int) -> Tuple[str, List[str]]:
    """
    Reads the last lines of the captured worker output.

    :param log_path: Location of the captured output file.
    :param lines: Maximum number of trailing lines to return.
    :return: A (state, lines) tuple where state is 'content', 'empty' or 'missing'.
    """
    try:
        if log_path.stat().st_size == 0:
            return LOG_EMPTY, []
        with log_path.open("r", encoding="utf-8", errors="replace") as f:
            tail = deque((line.rstrip("\n") for line in f), maxlen=lines)
    except FileNotFoundError:
        return LOG_MISSING, []
    except OSError as e:
        log.warning(f"Could not read log file '{log_path}': {e}")
        return LOG_MISSING, []

    return LOG_CONTENT, list(tail)
