"""
Nationality code lookup.

The portal identifies nationalities by numeric code. Guests usually
type a country name, so the code is derived when the record store
does not carry one.
"""

DEFAULT_NATIONALITY_CODE = "226"

NATIONALITY_CODES: dict[str, str] = {
    "United States": "226",
    "United Kingdom": "77",
    "Canada": "38",
    "Australia": "13",
    "Germany": "81",
    "France": "70",
    "Italy": "105",
    "Spain": "197",
    "Netherlands": "151",
    "Sweden": "202",
    "Norway": "157",
    "Denmark": "56",
    "Finland": "69",
}

_BY_LOWER_NAME = {name.lower(): code for name, code in NATIONALITY_CODES.items()}


def nationality_code_for(nationality: str) -> str:
    """Return the portal code for a nationality name, defaulting to 226 (United States)."""
    return _BY_LOWER_NAME.get((nationality or "").strip().lower(), DEFAULT_NATIONALITY_CODE)
