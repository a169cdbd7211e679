"""Login Page Object for MyFit Flutter Web app.

Flutter Web with CanvasKit renders semantic labels as aria-label attributes
on flt-semantics elements inside flt-semantics-container.
"""
import re

import structlog

from src.drivers.web.pages.base import BasePage
from src.drivers.web.semantics import LookupResult

logger = structlog.get_logger(__name__)

ALREADY_HAVE_ACCOUNT = re.compile(r"já tenho uma conta", re.IGNORECASE)
LOGIN_TEXT = re.compile(r"entrar|login", re.IGNORECASE)
POST_LOGIN_URL = re.compile(r"org-selector|dashboard|home")

EMAIL_INPUT = 'flt-semantics input[autocomplete="email"]:not([disabled])'


class LoginPage(BasePage):
    async def goto(self) -> None:
        """Open /login, skipping the landing page if the app shows it first."""
        await self.page.goto("/login")
        await self.flutter.wait_for_flutter()

        login_link = self.flutter.locate(role="button", text=ALREADY_HAVE_ACCOUNT)
        if await login_link.probe(2000):
            await login_link.click()

    async def login(self, email: str, password: str, *, expect_success: bool = True) -> None:
        """Login with credentials.

        With ``expect_success`` the call waits for the post-login route; pass
        False when the credentials are meant to be rejected.
        """
        await self.flutter.wait_for_flutter()

        # Two inputs per field: a disabled decorator and the live one
        email_input = self.page.locator(EMAIL_INPUT)
        password_input = self.flutter.enabled_inputs().nth(1)

        await self.flutter.fill_input(email_input, email)
        await self.flutter.fill_input(password_input, password)

        login_button = self.flutter.locate(label="login-button", role="button", text="Entrar")
        await login_button.click()
        logger.info("login_submitted", email=email)

        if expect_success:
            await self.page.wait_for_url(POST_LOGIN_URL, timeout=self.config.NAVIGATION_TIMEOUT_MS)

    async def is_displayed(self) -> LookupResult:
        """Login copy ("Entrar") is on screen."""
        return await self.flutter.locate(text=LOGIN_TEXT).probe(5000)
