"""Domain value objects."""

from .credentials import PortalCredentials
from .nationality import DEFAULT_NATIONALITY_CODE, NATIONALITY_CODES, nationality_code_for
from .run_id import RunID

__all__ = [
    "DEFAULT_NATIONALITY_CODE",
    "NATIONALITY_CODES",
    "PortalCredentials",
    "RunID",
    "nationality_code_for",
]
