"""Run locks enforcing single-flight orchestrator runs.

The database-backed lease lives in ``sql_run_lock`` and is imported
directly from there.
"""
from .in_process import InProcessRunLock

__all__ = ["InProcessRunLock"]
