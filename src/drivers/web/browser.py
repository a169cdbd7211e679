"""Browser launch and per-actor contexts.

Each actor (trainer, student) gets its own BrowserContext, so cookies,
storage and keyboard focus never leak between them.
"""
from dataclasses import dataclass, field

import structlog
from playwright.async_api import Browser, BrowserContext, Page, Playwright

from src.config.settings import Settings, settings
from src.drivers.web.flutter import FlutterHelper

logger = structlog.get_logger(__name__)


async def launch_browser(playwright: Playwright, config: Settings | None = None) -> Browser:
    config = config or settings
    browser_type = getattr(playwright, config.BROWSER)
    browser = await browser_type.launch(headless=config.HEADLESS, slow_mo=config.SLOW_MO_MS)
    logger.info("browser_launched", browser=config.BROWSER, headless=config.HEADLESS)
    return browser


@dataclass
class Actor:
    """One independently driven browser session."""

    name: str
    context: BrowserContext
    page: Page
    config: Settings = field(default_factory=lambda: settings)

    @property
    def flutter(self) -> FlutterHelper:
        return FlutterHelper(self.page, self.config)

    async def close(self) -> None:
        await self.context.close()
        logger.debug("actor_closed", actor=self.name)


async def open_actor(
    browser: Browser,
    name: str,
    *,
    config: Settings | None = None,
    storage_state: dict | None = None,
) -> Actor:
    """New isolated context + page for ``name``, pointed at the app URL."""
    config = config or settings
    context = await browser.new_context(
        base_url=config.E2E_APP_URL,
        viewport=config.viewport,
        storage_state=storage_state,
    )
    context.set_default_timeout(config.ACTION_TIMEOUT_MS)
    context.set_default_navigation_timeout(config.NAVIGATION_TIMEOUT_MS)
    page = await context.new_page()
    logger.debug("actor_opened", actor=name)
    return Actor(name=name, context=context, page=page, config=config)


def token_storage_state(token: str, config: Settings | None = None) -> dict:
    """Storage state that logs the app in with a pre-issued auth token."""
    config = config or settings
    return {
        "cookies": [],
        "origins": [
            {
                "origin": config.E2E_APP_URL,
                "localStorage": [{"name": "auth_token", "value": token}],
            }
        ],
    }
