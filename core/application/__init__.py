"""Application layer - ports the pipeline depends on."""

from .interfaces import (
    IRecordStore,
    IRemoteSessionDriver,
    IReportSink,
    IRunLock,
    ISheetValuesClient,
)

__all__ = [
    "IRecordStore",
    "IRemoteSessionDriver",
    "IReportSink",
    "IRunLock",
    "ISheetValuesClient",
]
