"""
Playwright session driver for the Sakani portal.

One instance drives one headless Chromium session for one submission
attempt. Playwright errors are left to propagate; the engine classifies
them per transition.
"""
import re
import time
from pathlib import Path
from typing import Optional, Union

from playwright.async_api import Browser, Page, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from core.application.interfaces import IRemoteSessionDriver
from core.domain.exceptions import AuthenticationError, AutomationStepError
from core.domain.value_objects import PortalCredentials
from guestflow_sdk.logging import get_logger

from .selectors import GUEST_MANAGEMENT_LABEL, PortalSelectors

logger = get_logger(__name__)

VIEWPORT = {"width": 1280, "height": 720}
LAUNCH_ARGS = ["--no-sandbox", "--disable-setuid-sandbox"]

SEARCH_SETTLE_MS = 2000
MENU_SETTLE_MS = 1000
UPLOAD_SETTLE_MS = 3000
PROBE_TIMEOUT_MS = 5000

_UNSAFE_TAG_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class PlaywrightSessionDriver(IRemoteSessionDriver):
    """Drives the Sakani guest management pages with Playwright."""

    def __init__(
        self,
        login_url: str,
        diagnostics_dir: Union[Path, str],
        headless: bool = True,
        slow_mo_ms: int = 250,
        timeout_seconds: float = 30.0,
        selectors: Optional[PortalSelectors] = None,
    ) -> None:
        """
        Initialize driver.

        Args:
            login_url: Portal login page
            diagnostics_dir: Where screenshots are written
            headless: Run Chromium without a window
            slow_mo_ms: Delay Playwright inserts between actions
            timeout_seconds: Default wait for each page action
            selectors: Selector table override
        """
        self._login_url = login_url
        self._diagnostics_dir = Path(diagnostics_dir)
        self._headless = headless
        self._slow_mo_ms = slow_mo_ms
        self._timeout_ms = int(timeout_seconds * 1000)
        self._selectors = selectors or PortalSelectors()

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None

    @classmethod
    def from_settings(cls, settings) -> "PlaywrightSessionDriver":
        """Build a driver from PortalSettings."""
        return cls(
            login_url=settings.login_url,
            diagnostics_dir=settings.diagnostics_dir,
            headless=settings.headless,
            slow_mo_ms=settings.slow_mo_ms,
            timeout_seconds=settings.default_timeout_seconds,
        )

    async def start(self) -> None:
        logger.info("Initializing portal browser session...")
        self._playwright = await async_playwright().start()
        self._browser = await self._playwright.chromium.launch(
            headless=self._headless,
            slow_mo=self._slow_mo_ms,
            args=LAUNCH_ARGS,
        )
        self._page = await self._browser.new_page(viewport=VIEWPORT)
        self._page.set_default_timeout(self._timeout_ms)
        logger.info("✓ Browser initialized")

    async def authenticate(self, credentials: PortalCredentials) -> None:
        if not credentials.is_complete:
            raise AuthenticationError("Portal credentials are not configured")

        page = self._require_page()
        sel = self._selectors
        logger.info("Logging in to portal...")
        await page.goto(self._login_url, wait_until="networkidle")
        await page.fill(sel.login_email, credentials.email)
        await page.fill(sel.login_password, credentials.password)
        await page.click(sel.login_submit)

        try:
            await page.wait_for_url(
                lambda url: "login" not in url.lower(),
                timeout=self._timeout_ms * 2,
            )
        except PlaywrightTimeoutError as exc:
            raise AuthenticationError(
                "Portal rejected the credentials (still on the login page)"
            ) from exc
        logger.info("✓ Successfully logged in")

    async def select_context(self, context_id: str) -> None:
        page = self._require_page()
        sel = self._selectors
        logger.info(f"Selecting property: {context_id}")

        await page.click(sel.switch_context)
        await page.fill(sel.context_search, context_id)
        await page.wait_for_timeout(SEARCH_SETTLE_MS)

        result = page.locator(sel.context_result).first
        await result.wait_for(state="visible")
        async with page.expect_navigation(wait_until="networkidle"):
            await result.click()
        logger.info(f"✓ Selected property: {context_id}")

    async def navigate_to_submission_surface(self) -> None:
        page = self._require_page()
        sel = self._selectors
        logger.info("Navigating to Guest Management...")

        try:
            await page.click(sel.menu_toggle, timeout=PROBE_TIMEOUT_MS)
            await page.wait_for_timeout(MENU_SETTLE_MS)
        except PlaywrightTimeoutError:
            logger.debug("Menu toggle not shown, menu already expanded")

        await self._open_guest_management(page)
        await page.click(sel.add_guest)
        await page.locator(sel.fields["first_name"]).wait_for(state="visible")
        logger.info("✓ Guest form opened")

    async def set_field(self, name: str, value: str) -> None:
        selector = self._selectors.field_selector(name)
        if selector is None:
            raise AutomationStepError(f"Unknown portal field: {name}")

        control = self._require_page().locator(selector)
        tag = await control.evaluate("el => el.tagName.toLowerCase()")
        if tag != "select":
            await control.fill(value)
            return

        options = await control.evaluate("el => Array.from(el.options).map(o => o.value)")
        if value in options:
            await control.select_option(value=value)
        else:
            await control.select_option(label=value)

    async def attach_file(self, local_path: Path) -> None:
        page = self._require_page()
        sel = self._selectors
        logger.info(f"Uploading passport: {local_path}")

        await page.click(sel.upload_trigger)
        await page.locator(sel.file_input).first.set_input_files(str(local_path))
        await page.wait_for_timeout(UPLOAD_SETTLE_MS)
        logger.info("✓ Passport uploaded")

    async def submit(self) -> None:
        await self._require_page().click(self._selectors.submit)
        logger.info("✓ Guest form submitted")

    async def await_confirmation(self, timeout: float) -> bool:
        page = self._require_page()
        sel = self._selectors
        try:
            if sel.confirmation:
                await page.locator(sel.confirmation).first.wait_for(
                    state="visible", timeout=timeout * 1000
                )
            else:
                await page.locator(sel.fields["first_name"]).wait_for(
                    state="hidden", timeout=timeout * 1000
                )
        except PlaywrightTimeoutError:
            return False
        return True

    async def capture_diagnostic(self, tag: str) -> Optional[str]:
        if self._page is None:
            return None
        self._diagnostics_dir.mkdir(parents=True, exist_ok=True)
        safe_tag = _UNSAFE_TAG_CHARS.sub("_", tag)
        path = self._diagnostics_dir / f"{safe_tag}-{int(time.time() * 1000)}.png"
        await self._page.screenshot(path=str(path), full_page=True)
        logger.info(f"Screenshot saved: {path}")
        return str(path)

    async def close(self) -> None:
        browser, playwright = self._browser, self._playwright
        self._page = None
        self._browser = None
        self._playwright = None
        try:
            if browser is not None:
                await browser.close()
                logger.info("✓ Browser closed")
        finally:
            if playwright is not None:
                await playwright.stop()

    async def _open_guest_management(self, page: Page) -> None:
        sel = self._selectors
        for candidate in sel.guest_menu_candidates:
            try:
                await page.locator(candidate).first.click(timeout=PROBE_TIMEOUT_MS)
            except PlaywrightError:
                continue
            logger.info(f"✓ Found Guest Management using selector: {candidate}")
            await page.wait_for_timeout(SEARCH_SETTLE_MS)
            return

        item = page.locator(sel.menu_item, has_text=GUEST_MANAGEMENT_LABEL).first
        try:
            await item.click(timeout=PROBE_TIMEOUT_MS)
        except PlaywrightError as exc:
            raise AutomationStepError("Could not find Guest Management menu item") from exc
        await page.wait_for_timeout(SEARCH_SETTLE_MS)

    def _require_page(self) -> Page:
        if self._page is None:
            raise AutomationStepError("Portal session is not started")
        return self._page
