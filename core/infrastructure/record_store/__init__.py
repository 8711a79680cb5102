"""Record store adapters.

The aiohttp-backed Google Sheets client lives in ``sheets_client`` and is
imported directly from there.
"""
from .field_aliases import GUEST_FIELD_ALIASES, ColumnMap, FieldAlias, column_letter
from .sheets_record_store import SheetsRecordStore

__all__ = [
    "GUEST_FIELD_ALIASES",
    "ColumnMap",
    "FieldAlias",
    "SheetsRecordStore",
    "column_letter",
]
