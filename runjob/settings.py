"""
This module contains the configuration settings for the runjob supervisor.
It defines the record paths, the worker invocation and the timings of the
supervision state machine. Values can be overridden through the environment
or a `.env` file in the working directory.
"""

import os
import shlex
import pathlib
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv(override=True)

#* --- Persisted Records (relative to the supervisor's working directory) ---
PID_FILE_PATH = pathlib.Path(os.getenv("RUNJOB_PID_FILE", "website.pid"))
LOG_FILE_PATH = pathlib.Path(os.getenv("RUNJOB_LOG_FILE", "website.log"))
OVERRIDES_JSON_PATH = pathlib.Path(os.getenv("RUNJOB_OVERRIDES", "runjob.overrides.json"))

#* --- Worker Invocation ---
WORKER_COMMAND = shlex.split(os.getenv("RUNJOB_WORKER_COMMAND", "python3 website.py"))
# Command-line fragment identifying a running worker in the process table.
WORKER_SIGNATURE = os.getenv("RUNJOB_WORKER_SIGNATURE", " ".join(WORKER_COMMAND))
WORKER_CACHE_PATH = os.getenv("RUNJOB_WORKER_CACHE", ".cache/09Qy5sb2Fkcyg.txt")
RESERVED_CORES = int(os.getenv("RUNJOB_RESERVED_CORES", "2"))

#* --- Supervisor Timings (seconds) ---
STARTUP_SETTLE_DELAY = 2
GRACEFUL_SHUTDOWN_TIMEOUT = 5  # before force-killing
KILL_WAIT_TIMEOUT = 2
CYCLE_RUN_DURATION = int(os.getenv("RUNJOB_CYCLE_RUN", "30"))
CYCLE_COOLDOWN = int(os.getenv("RUNJOB_CYCLE_COOLDOWN", "5"))

#* --- Status Report ---
STATUS_TAIL_LINES = 10
# Pauses after the header, before the log report and after the log report.
STATUS_PACING_DELAYS = (3, 2, 3)

#* --- Logging ---
_supervisor_log = os.getenv("RUNJOB_SUPERVISOR_LOG", "")
SUPERVISOR_LOG_PATH = pathlib.Path(_supervisor_log) if _supervisor_log else None
PROCESS_TITLE = "runjob - Supervisor"

#* --- MODIFIABLE SETTINGS (Changeable through the overrides file) ---
MODIFIABLE_SETTINGS = {
    "PID_FILE_PATH", "LOG_FILE_PATH",
    "WORKER_CACHE_PATH", "RESERVED_CORES",
    "STARTUP_SETTLE_DELAY", "GRACEFUL_SHUTDOWN_TIMEOUT", "KILL_WAIT_TIMEOUT",
    "CYCLE_RUN_DURATION", "CYCLE_COOLDOWN", "STATUS_TAIL_LINES",
}
