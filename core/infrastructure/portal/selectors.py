"""
Sakani portal selectors.

Every CSS selector the driver touches lives here so a portal layout
change is a one-file fix.
"""
from dataclasses import dataclass, field
from typing import Optional

GUEST_MANAGEMENT_LABEL = "Guest Management"


def _default_fields() -> dict[str, str]:
    # Logical field name -> form control. "PassportExpirtDate" is the portal's spelling.
    return {
        "first_name": "#FirstName",
        "last_name": "#LastName",
        "nationality_code": "#ddlNationality",
        "passport_number": "#PassportNumber",
        "passport_expiry": "#PassportExpirtDate",
        "total_guests": "#ddlTotalGuests",
        "children": "#ddlChildrens",
        "check_in_date": "#CheckInDate",
        "check_in_time": "#ddlCheckInTime",
        "check_out_date": "#CheckOutDate",
        "check_out_time": "#CheckOutTime",
    }


@dataclass(frozen=True)
class PortalSelectors:
    """Selector table for the portal pages the driver visits."""

    login_email: str = "#txtloginEmail"
    login_password: str = "#txtloginPassword"
    login_submit: str = "#home button"

    switch_context: str = "#liSwitchProperties > a"
    context_search: str = "#search-friends"
    context_result: str = "div.h-list-body > div > div:nth-of-type(1) h6"

    menu_toggle: str = "#mobile-collapse1 > span"
    guest_menu_candidates: tuple[str, ...] = (
        "li:nth-of-type(11) span.pcoded-mtext",
        f'span.pcoded-mtext:has-text("{GUEST_MANAGEMENT_LABEL}")',
        f'[title="{GUEST_MANAGEMENT_LABEL}"]',
        'a[href*="guest"]',
    )
    menu_item: str = ".pcoded-mtext"
    add_guest: str = "div.pcoded-main-container button"

    upload_trigger: str = "div:nth-of-type(4) > div:nth-of-type(3) > div span"
    file_input: str = 'input[type="file"]'
    submit: str = "div.m-t-15 > div:nth-of-type(2) label"

    # When unset, the form closing (first name field hidden) counts as the acknowledgement.
    confirmation: Optional[str] = None

    fields: dict[str, str] = field(default_factory=_default_fields)

    def field_selector(self, name: str) -> Optional[str]:
        return self.fields.get(name)
