"""
Field alias table.

The same logical column appears under several header spellings depending
on which form produced the sheet. Each logical field lists its accepted
headers in precedence order; the first one present in the header row wins.
Matching ignores case and surrounding whitespace.
"""
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FieldAlias:
    """Accepted header spellings for one logical field, highest precedence first."""

    field: str
    aliases: tuple[str, ...]


GUEST_FIELD_ALIASES: tuple[FieldAlias, ...] = (
    FieldAlias("timestamp", ("Timestamp", "Submitted At", "submission_date")),
    FieldAlias("first_name", ("First Name", "firstName", "first_name")),
    FieldAlias("last_name", ("Last Name", "lastName", "last_name")),
    FieldAlias("email", ("Email", "Email Address")),
    FieldAlias("phone", ("Phone", "Phone Number")),
    FieldAlias("nationality", ("Nationality",)),
    FieldAlias("nationality_code", ("Nationality Code", "nationalityCode", "nationality_code")),
    FieldAlias("passport_number", ("Passport Number", "passportNumber", "passport_number")),
    FieldAlias("passport_expiry", ("Passport Expiry", "passportExpiry", "passport_expiry")),
    FieldAlias(
        "attachment_refs",
        ("Attachment References", "Passport Files", "passportFiles", "passport_files"),
    ),
    FieldAlias("check_in_date", ("Check-in Date", "checkInDate", "checkin_date")),
    FieldAlias("check_in_time", ("Check-in Time", "checkInTime", "checkin_time")),
    FieldAlias("check_out_date", ("Check-out Date", "checkOutDate", "checkout_date")),
    FieldAlias("check_out_time", ("Check-out Time", "checkOutTime", "checkout_time")),
    FieldAlias("total_guests", ("Total Guests", "totalGuests", "total_guests")),
    FieldAlias("children", ("Children",)),
    FieldAlias("property_number", ("Property Number", "propertyNumber", "property_number")),
    FieldAlias("status", ("Status",)),
    FieldAlias("processing_notes", ("Processing Notes", "processingNotes", "processing_notes")),
    FieldAlias("last_processed", ("Last Processed", "lastProcessed", "last_processed")),
    FieldAlias("portal_synced", ("Portal Synced", "Sakani Synced", "sakaniSync", "sakani_sync")),
    FieldAlias(
        "downstream_synced",
        ("Downstream Synced", "Hostaway Synced", "hostawaySync", "hostaway_sync"),
    ),
)


def _normalize(header: str) -> str:
    return (header or "").strip().lower()


def column_letter(index: int) -> str:
    """Convert a 0-based column index to A1 letters (0 -> A, 26 -> AA)."""
    if index < 0:
        raise ValueError(f"Column index must be >= 0, got {index}")
    letters = ""
    while index >= 0:
        letters = chr(ord("A") + index % 26) + letters
        index = index // 26 - 1
    return letters


class ColumnMap:
    """Logical field -> column index, resolved once per header row."""

    def __init__(self, headers: Sequence[str], indexes: dict[str, int]) -> None:
        self.headers = list(headers)
        self._indexes = dict(indexes)

    @classmethod
    def resolve(
        cls,
        headers: Sequence[str],
        table: Sequence[FieldAlias] = GUEST_FIELD_ALIASES,
    ) -> "ColumnMap":
        positions: dict[str, int] = {}
        for index, header in enumerate(headers):
            positions.setdefault(_normalize(header), index)

        indexes: dict[str, int] = {}
        for entry in table:
            for alias in entry.aliases:
                position = positions.get(_normalize(alias))
                if position is not None:
                    indexes[entry.field] = position
                    break
        return cls(headers, indexes)

    def has(self, field: str) -> bool:
        return field in self._indexes

    def index_of(self, field: str) -> Optional[int]:
        return self._indexes.get(field)

    def letter_of(self, field: str) -> Optional[str]:
        index = self._indexes.get(field)
        return column_letter(index) if index is not None else None

    def value(self, row: Sequence[str], field: str, default: str = "") -> str:
        """Cell value for field in row; short rows and absent columns yield default."""
        index = self._indexes.get(field)
        if index is None or index >= len(row):
            return default
        cell = row[index]
        text = str(cell).strip() if cell is not None else ""
        return text or default
