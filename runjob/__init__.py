"""
runjob: a single-job process supervisor.

Starts one long-running worker detached from the invoking session, reports
its liveness and recent output, and stops it with a graceful-then-forceful
signal escalation.
"""
