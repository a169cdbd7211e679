"""
E2E Test Configuration and Fixtures for browser journeys.

IMPORTANT: These tests must ONLY run in local or development environments.
NEVER run these tests against production databases or APIs.

Needs two servers running:
- E2E API server: http://localhost:8001 (myfit-api ``python -m tests.e2e.server``)
- Flutter Web app: http://localhost:3000 (flutter build web + serve)
"""

from collections.abc import AsyncGenerator

import httpx
import pytest
import structlog
from playwright.async_api import Browser, Page, async_playwright

from src.config.settings import settings
from src.core.logging import bind_actor, clear_actor
from src.drivers.api.client import TestControlClient
from src.drivers.api.schemas import ScenarioData
from src.drivers.web.browser import Actor, launch_browser, open_actor
from src.drivers.web.pages import DashboardPage, LoginPage

logger = structlog.get_logger(__name__)


# =============================================================================
# Server availability
# =============================================================================


@pytest.fixture(scope="session")
def app_available() -> None:
    """Skip browser journeys when the Flutter build is not being served."""
    try:
        httpx.get(settings.E2E_APP_URL, timeout=5.0)
    except httpx.TransportError:
        pytest.skip(f"Flutter Web app not served at {settings.E2E_APP_URL}")


@pytest.fixture
async def api() -> AsyncGenerator[TestControlClient, None]:
    """Test-control client; skips when the E2E server is down, resets after."""
    async with TestControlClient() as client:
        if not await client.is_available():
            pytest.skip(f"E2E server not running at {settings.E2E_API_URL}")
        yield client
        await client.reset_quietly()


@pytest.fixture
async def cotraining(api: TestControlClient) -> ScenarioData:
    return await api.setup_scenario("cotraining")


@pytest.fixture
async def feedback_loop(api: TestControlClient) -> ScenarioData:
    return await api.setup_scenario("feedback_loop")


# =============================================================================
# Browser and actors
# =============================================================================


@pytest.fixture
async def browser(app_available) -> AsyncGenerator[Browser, None]:
    async with async_playwright() as playwright:
        browser = await launch_browser(playwright)
        yield browser
        await browser.close()


@pytest.fixture
async def guest(browser: Browser) -> AsyncGenerator[Actor, None]:
    actor = await open_actor(browser, "guest")
    yield actor
    await actor.close()


@pytest.fixture
def page(guest: Actor) -> Page:
    return guest.page


@pytest.fixture
async def trainer(browser: Browser) -> AsyncGenerator[Actor, None]:
    actor = await open_actor(browser, "trainer")
    yield actor
    await actor.close()


@pytest.fixture
async def student(browser: Browser) -> AsyncGenerator[Actor, None]:
    actor = await open_actor(browser, "student")
    yield actor
    await actor.close()


async def _login_as(actor: Actor, email: str, password: str) -> DashboardPage:
    """Log ``actor`` in through the UI and wait for its dashboard."""
    bind_actor(actor.name)
    try:
        login = LoginPage(actor.page, actor.config)
        await login.goto()
        await login.login(email, password)

        dashboard = DashboardPage(actor.page, actor.config)
        await dashboard.wait_for_load()
        logger.info("actor_logged_in", email=email, url=actor.page.url)
        return dashboard
    finally:
        clear_actor()


@pytest.fixture
def login_as():
    """Coroutine logging an actor in: ``await login_as(actor, email, password)``."""
    return _login_as
