"""Infrastructure adapters.

Keep this package import-light: network- and browser-backed adapters
(aiohttp, playwright, sqlalchemy) are imported from their own modules.
"""
