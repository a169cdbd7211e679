"""Shared plumbing for the Flutter page objects."""
import re

from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.config.settings import Settings, settings
from src.drivers.web.flutter import FlutterHelper
from src.drivers.web.semantics import LookupResult

ERROR_TEXT = re.compile(r"erro|error|inválido|invalid", re.IGNORECASE)


class BasePage:
    def __init__(self, page: Page, config: Settings | None = None):
        self.page = page
        self.config = config or settings
        self.flutter = FlutterHelper(page, self.config)

    async def wait_for_url(self, pattern: re.Pattern, timeout_ms: int | None = None) -> LookupResult:
        """Soft navigation check: FOUND with the URL, or NOT_FOUND on timeout."""
        timeout_ms = self.config.NAVIGATION_TIMEOUT_MS if timeout_ms is None else timeout_ms
        try:
            await self.page.wait_for_url(pattern, timeout=timeout_ms)
        except PlaywrightTimeoutError:
            return LookupResult.miss()
        return LookupResult.hit(self.page.url)

    async def get_error_message(self, timeout_ms: int = 2000) -> str | None:
        """Text of a snackbar/alert, or of any node that reads like an error."""
        # Snackbars surface as alert live regions
        for candidate in (
            self.flutter.locate(role="alert"),
            self.flutter.locate(text=ERROR_TEXT),
        ):
            if await candidate.probe(timeout_ms):
                return await candidate.text_content()
        return None
