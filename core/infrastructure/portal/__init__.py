"""
Portal adapters.

The Playwright driver is not re-exported here so that importing the
selector table does not require a browser runtime. Import it from
``core.infrastructure.portal.playwright_driver``.
"""
from .selectors import PortalSelectors

__all__ = ["PortalSelectors"]
