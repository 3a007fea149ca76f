"""
The Supervisor package.
Manages the lifecycle of the single supervised worker process.

This package contains the JobSupervisor class and its helper modules, which
together handle locating, starting, stopping and cycling the worker and
maintaining its PID and output records.
"""
from .supervisor import JobSupervisor

__all__ = ['JobSupervisor']
