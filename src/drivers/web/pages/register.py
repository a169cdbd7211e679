"""Registration Page Object for MyFit Flutter Web app.

Handles:
- Welcome page navigation
- User type selection (Personal Trainer / Student)
- Registration form
- Social login buttons (Google/Apple)
"""
import re
from typing import Literal

from src.drivers.web.pages.base import BasePage
from src.drivers.web.pages.login import ALREADY_HAVE_ACCOUNT, EMAIL_INPUT
from src.drivers.web.semantics import LookupResult

START_FREE = re.compile(r"começar gratuitamente", re.IGNORECASE)
CONTINUE = re.compile(r"continuar", re.IGNORECASE)
CREATE_ACCOUNT = re.compile(r"criar conta", re.IGNORECASE)
USER_TYPE_PROMPT = re.compile(r"você é", re.IGNORECASE)
REGISTRATION_TEXT = re.compile(r"criar conta|cadastro", re.IGNORECASE)

USER_TYPE_CARDS = {
    "personal": re.compile(r"personal trainer", re.IGNORECASE),
    "student": re.compile(r"aluno", re.IGNORECASE),
}


class RegisterPage(BasePage):
    async def goto(self) -> None:
        """Navigate to the welcome page."""
        await self.page.goto("/")
        await self.flutter.wait_for_flutter()

    def start_free_button(self):
        return self.flutter.locate(role="button", text=START_FREE)

    def already_have_account_button(self):
        return self.flutter.locate(role="button", text=ALREADY_HAVE_ACCOUNT)

    def user_type_card(self, user_type: Literal["personal", "student"]):
        return self.flutter.locate(role="button", text=USER_TYPE_CARDS[user_type])

    async def click_start_free(self) -> None:
        """Click "Começar Gratuitamente" on the welcome page."""
        await self.start_free_button().click()

    async def click_already_have_account(self) -> None:
        """Click "Já tenho uma conta" on the welcome page to go to login."""
        await self.already_have_account_button().click()

    async def select_user_type(self, user_type: Literal["personal", "student"]) -> None:
        await self.user_type_card(user_type).click()

    async def click_continue(self) -> None:
        await self.flutter.locate(role="button", text=CONTINUE).click()

    async def is_user_type_selection_displayed(self) -> LookupResult:
        return await self.flutter.locate(text=USER_TYPE_PROMPT).probe(5000)

    async def is_google_button_visible(self) -> LookupResult:
        return await self.flutter.locate(role="button", text=re.compile("google", re.I)).probe(3000)

    async def is_apple_button_visible(self) -> LookupResult:
        return await self.flutter.locate(role="button", text=re.compile("apple", re.I)).probe(3000)

    async def fill_registration_form(self, name: str, email: str, password: str) -> None:
        inputs = self.flutter.enabled_inputs()

        # Name is the first text field, password the third
        await self.flutter.fill_input(inputs.first, name)
        await self.flutter.fill_input(self.page.locator(EMAIL_INPUT), email)
        await self.flutter.fill_input(inputs.nth(2), password)

    async def click_create_account(self) -> None:
        await self.flutter.locate(role="button", text=CREATE_ACCOUNT).click()

    async def is_registration_page_displayed(self) -> LookupResult:
        return await self.flutter.locate(text=REGISTRATION_TEXT).probe(5000)
