import sys
import logging
from typing import List, Optional

import setproctitle

from runjob.config import effective_settings as config
from runjob.log.setup import setup_logging
from runjob.supervisor import JobSupervisor

log = logging.getLogger(__name__)

COMMANDS = ("start", "stop", "status", "cycle", "restart")
USAGE = f"Usage: runjob {{{'|'.join(COMMANDS)}}} [--verbose]"


def execute_command(supervisor: JobSupervisor, command: str) -> bool:
    """
    Executes a single supervisor command.

    :param supervisor: The JobSupervisor to act on.
    :param command: The command name (e.g., 'start', 'status').
    :return: True if the command was recognized, False otherwise.
    """
    command_map = {
        "start": supervisor.start,
        "stop": supervisor.stop,
        "status": supervisor.status,
        "cycle": supervisor.cycle,
        "restart": supervisor.restart,
    }
    if command not in command_map:
        return False

    log.debug(f"Executing command: {command}")
    command_map[command]()
    return True


def main(argv: Optional[List[str]] = None) -> int:
    """
    The entry point for the command-line interface.

    Job outcomes are reported as text only; the exit status is non-zero
    solely for a missing or unknown command.
    """
    args = list(sys.argv[1:] if argv is None else argv)

    verbose = "--verbose" in args
    if verbose:
        args.remove("--verbose")

    if len(args) != 1 or args[0] not in COMMANDS:
        print(USAGE)
        return 1

    setproctitle.setproctitle(config.PROCESS_TITLE)
    setup_logging(logging.DEBUG if verbose else logging.INFO)

    execute_command(JobSupervisor(config), args[0])
    return 0


if __name__ == "__main__":
    sys.exit(main())
