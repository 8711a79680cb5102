"""
Guest record entity.

CRITICAL: This file must contain ZERO imports from:
- aiohttp
- playwright
- sqlalchemy
- pydantic
"""
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Optional

from guestflow_sdk.utils.datetime import format_portal_date

from ..enums import RecordStatus
from ..exceptions import ValidationError

DEFAULT_CHECK_IN_TIME = "3:00PM"
DEFAULT_CHECK_OUT_TIME = "11:00AM"

REQUIRED_FIELDS = ("first_name", "last_name", "passport_number")


@dataclass
class GuestRecord:
    """
    One guest's registration as read from the record store.

    The id is derived from the sheet row (``row_<n>``) and is stable
    as long as rows are only appended.
    """

    id: str
    row_number: int
    first_name: str
    last_name: str
    passport_number: str
    email: str = ""
    phone: str = ""
    nationality: str = ""
    nationality_code: str = ""
    passport_expiry: str = ""
    check_in_date: str = ""
    check_in_time: str = DEFAULT_CHECK_IN_TIME
    check_out_date: str = ""
    check_out_time: str = DEFAULT_CHECK_OUT_TIME
    total_guests: int = 1
    children: int = 0
    property_number: str = ""
    attachment_refs: tuple[str, ...] = field(default_factory=tuple)
    status: RecordStatus = RecordStatus.NEW
    processing_notes: str = ""
    last_processed_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def primary_attachment(self) -> Optional[str]:
        """First attachment reference, the one submitted to the portal."""
        return self.attachment_refs[0] if self.attachment_refs else None

    def missing_required_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not str(getattr(self, name)).strip()]

    def validate(self) -> None:
        """
        Check the required-field invariant.

        Raises:
            ValidationError: If first name, last name or passport number is empty
        """
        missing = self.missing_required_fields()
        if missing:
            raise ValidationError(self.id, missing)

    def with_status(self, status: RecordStatus, notes: str, at: datetime) -> "GuestRecord":
        """Return a copy carrying a new status and its diagnostic metadata."""
        return replace(self, status=status, processing_notes=notes, last_processed_at=at)

    def portal_fields(self) -> list[tuple[str, str]]:
        """
        Ordered (field name, value) pairs written to the portal form.

        Dates are normalized to YYYY-MM-DD. Empty time fields are left out
        so the portal keeps its own default.
        """
        fields = [
            ("first_name", self.first_name),
            ("last_name", self.last_name),
            ("nationality_code", str(self.nationality_code)),
            ("passport_number", self.passport_number),
            ("passport_expiry", format_portal_date(self.passport_expiry)),
            ("total_guests", str(self.total_guests)),
            ("children", str(self.children)),
            ("check_in_date", format_portal_date(self.check_in_date)),
            ("check_in_time", self.check_in_time),
            ("check_out_date", format_portal_date(self.check_out_date)),
            ("check_out_time", self.check_out_time),
        ]
        return [
            (name, value)
            for name, value in fields
            if not (name.endswith("_time") and not value)
        ]
