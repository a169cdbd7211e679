"""Test configuration and fixtures for the MyFit Web E2E drivers."""

from collections.abc import AsyncGenerator, Callable

import pytest
from httpx import ASGITransport

from src.config.settings import Settings, validate_environment
from src.core.logging import configure_logging
from src.core.observability import capture_test_failure, init_observability
from src.drivers.api.client import TestControlClient
from src.drivers.web.flutter import FlutterHelper
from tests.fakes.page import FakeFlutterPage, FakeNode
from tests.fakes.scenarios import E2EStore
from tests.fakes.server import create_e2e_app


def pytest_configure(config):
    validate_environment()
    configure_logging()
    init_observability()


@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    report = outcome.get_result()
    if report.when == "call" and report.failed and call.excinfo is not None:
        capture_test_failure(
            item.nodeid,
            call.excinfo.value,
            tags={"e2e": str(item.get_closest_marker("e2e") is not None).lower()},
        )


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    """Use asyncio backend for tests."""
    return "asyncio"


@pytest.fixture
def test_settings() -> Settings:
    """Settings isolated from the developer's .env."""
    return Settings(_env_file=None, ENVIRONMENT="test", DEFAULT_MAX_TABS=20)


# =============================================================================
# Fake test-control API
# =============================================================================


@pytest.fixture
def e2e_store() -> E2EStore:
    return E2EStore()


@pytest.fixture
async def api_client(e2e_store: E2EStore, test_settings: Settings) -> AsyncGenerator[TestControlClient, None]:
    """TestControlClient wired to the in-process fake E2E server."""
    app = create_e2e_app(e2e_store)
    async with TestControlClient(
        "http://test",
        config=test_settings,
        transport=ASGITransport(app=app),
    ) as client:
        yield client


# =============================================================================
# Fake Flutter pages
# =============================================================================


@pytest.fixture
def make_page() -> Callable[..., FakeFlutterPage]:
    """Factory for Flutter page doubles."""
    return FakeFlutterPage


@pytest.fixture
def login_nodes() -> list[FakeNode]:
    """Login screen in tab order: email, password, forgot link, login button."""
    return [
        FakeNode(
            role="textbox", label="Email",
            children=[
                FakeNode(tag="input", disabled=True, focusable=False),
                FakeNode(tag="input", autocomplete="email", focusable=False),
            ],
        ),
        FakeNode(
            role="textbox", label="Senha",
            children=[
                FakeNode(tag="input", disabled=True, focusable=False),
                FakeNode(tag="input", autocomplete="current-password", focusable=False),
            ],
        ),
        FakeNode(role="link", text="Esqueci minha senha"),
        FakeNode(
            role="button", label="login-button", text="Login",
            on_activate=lambda page: setattr(page, "url", "http://localhost:3000/dashboard"),
        ),
    ]


@pytest.fixture
def login_page(login_nodes: list[FakeNode]) -> FakeFlutterPage:
    return FakeFlutterPage(login_nodes, url="http://localhost:3000/login")


@pytest.fixture
def flutter(login_page: FakeFlutterPage, test_settings: Settings) -> FlutterHelper:
    return FlutterHelper(login_page, test_settings)
