"""Run report sinks.

The database history sink lives in ``sql_history`` and is imported
directly from there.
"""
from .json_sink import JsonReportSink

__all__ = ["JsonReportSink"]
