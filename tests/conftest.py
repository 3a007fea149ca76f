"""Shared test fixtures — throwaway worker scripts and shrunk supervisor timings."""

from __future__ import annotations

import sys
import textwrap

import psutil
import pytest

from runjob.config import MergedSettings
from runjob.supervisor import JobSupervisor
from runjob.supervisor.process_utils import locate


WORKER_SOURCE = textwrap.dedent("""
    import sys
    import time

    print(f"worker started with {sys.argv[1:]}", flush=True)
    while True:
        time.sleep(0.1)
""")

STUBBORN_WORKER_SOURCE = textwrap.dedent("""
    import signal
    import time

    signal.signal(signal.SIGTERM, signal.SIG_IGN)
    print("stubborn worker ignoring SIGTERM", flush=True)
    while True:
        time.sleep(0.1)
""")

# The forked child shares the parent's argv, so both match the signature.
FORKING_WORKER_SOURCE = textwrap.dedent("""
    import os
    import signal
    import time

    print("forking worker started", flush=True)
    if os.fork() == 0:
        signal.signal(signal.SIGTERM, signal.SIG_IGN)
    while True:
        time.sleep(0.1)
""")

# Timings small enough for tests but long enough for a Python worker to boot.
FAST_TIMINGS = {
    "STARTUP_SETTLE_DELAY": 1.0,
    "GRACEFUL_SHUTDOWN_TIMEOUT": 2.0,
    "KILL_WAIT_TIMEOUT": 1.0,
    "CYCLE_RUN_DURATION": 1.5,
    "CYCLE_COOLDOWN": 0.5,
    "STATUS_PACING_DELAYS": (0, 0, 0),
}


def _kill_matching(signature: str) -> None:
    for pid in locate(signature):
        try:
            proc = psutil.Process(pid)
            proc.kill()
            proc.wait(timeout=5)
        except psutil.Error:
            continue


@pytest.fixture
def make_config(tmp_path):
    """Factory for settings isolated in tmp_path, with a per-test worker script."""
    signatures: list[str] = []

    def _factory(source: str = WORKER_SOURCE, **overrides) -> MergedSettings:
        script = tmp_path / f"worker_{len(signatures)}.py"
        script.write_text(source)
        settings = {
            "OVERRIDES_JSON_PATH": tmp_path / "absent-overrides.json",
            "PID_FILE_PATH": tmp_path / "job.pid",
            "LOG_FILE_PATH": tmp_path / "job.log",
            "WORKER_COMMAND": [sys.executable, str(script)],
            "WORKER_CACHE_PATH": str(tmp_path / ".cache" / "cache.txt"),
            **FAST_TIMINGS,
        }
        settings.update(overrides)
        config = MergedSettings(**settings)
        signatures.append(config.WORKER_SIGNATURE)
        return config

    yield _factory

    for signature in signatures:
        _kill_matching(signature)


@pytest.fixture
def supervisor(make_config):
    return JobSupervisor(make_config())


@pytest.fixture
def stubborn_supervisor(make_config):
    return JobSupervisor(make_config(STUBBORN_WORKER_SOURCE))


@pytest.fixture
def forking_supervisor(make_config):
    return JobSupervisor(make_config(FORKING_WORKER_SOURCE))
