"""Onboarding Page Object for MyFit Flutter Web app.

Handles:
- Trainer onboarding flow (welcome, CREF, invite, plan, templates, complete)
- Student onboarding flow (welcome, goal, experience, body, frequency, injuries, complete)
- CREF input with mask validation
"""
import re
from typing import Literal

import structlog

from src.drivers.web.pages.base import BasePage
from src.drivers.web.semantics import LookupResult

logger = structlog.get_logger(__name__)

# CREF registration: six digits, dash, G/B/L/F
CREF_PATTERN = re.compile(r"^\d{6}-[GBLF]$")

NEXT = re.compile(r"próximo|continuar", re.IGNORECASE)
SKIP = re.compile(r"pular|skip", re.IGNORECASE)
COMPLETE = re.compile(r"concluir|finalizar|complete", re.IGNORECASE)
WELCOME = re.compile(r"bem-vindo|welcome", re.IGNORECASE)
STEP_HINT = re.compile(r"passo|step|próximo|continuar", re.IGNORECASE)
STEP_INDICATOR = re.compile(r"passo \d|step \d", re.IGNORECASE)
DASHBOARD_URL = re.compile(r"home|dashboard|trainer")

FitnessGoal = Literal["perder peso", "ganhar massa", "saúde", "condicionamento"]
ExperienceLevel = Literal["iniciante", "intermediário", "avançado"]

GOAL_PATTERNS: dict[str, re.Pattern] = {
    "perder peso": re.compile(r"perder peso|emagrecer", re.IGNORECASE),
    "ganhar massa": re.compile(r"ganhar massa|hipertrofia", re.IGNORECASE),
    "saúde": re.compile(r"saúde|bem-estar", re.IGNORECASE),
    "condicionamento": re.compile(r"condicionamento|resistência", re.IGNORECASE),
}

TRAINER_OPTIONAL_STEPS = 4  # CREF, invite, plan, templates
STUDENT_OPTIONAL_STEPS = 5  # experience, body, frequency, injuries, extras


def is_valid_cref(cref: str) -> bool:
    return bool(CREF_PATTERN.match(cref.strip().upper()))


class OnboardingPage(BasePage):
    async def wait_for_load(self) -> None:
        await self.flutter.wait_for_flutter()
        await self.flutter.locate(text=STEP_HINT).wait_for()

    async def is_on_welcome_step(self) -> LookupResult:
        return await self.flutter.locate(text=WELCOME).probe(2000)

    async def is_displayed(self) -> LookupResult:
        return await self.flutter.locate(text=STEP_HINT).probe(5000)

    async def click_next(self) -> None:
        """Click "Próximo" or "Continuar" to go to the next step."""
        await self.flutter.locate(role="button", text=NEXT).click()

    async def click_skip(self) -> bool:
        """Click "Pular" when the step offers it. Returns whether it did."""
        skip = self.flutter.locate(role="button", text=SKIP)
        if not await skip.probe(2000):
            return False
        await skip.click()
        return True

    async def click_complete(self) -> None:
        """Click "Concluir" or "Finalizar" to complete onboarding."""
        await self.flutter.locate(role="button", text=COMPLETE).click()

    async def advance(self) -> None:
        """Skip the current step, or move past it when it can't be skipped."""
        if not await self.click_skip():
            await self.click_next()

    async def fill_cref(self, cref: str, *, validate: bool = True) -> None:
        """Fill the CREF field (trainer onboarding), format 000000-X."""
        if validate and not is_valid_cref(cref):
            raise ValueError(f"Invalid CREF {cref!r}, expected 000000-G/B/L/F")
        await self.flutter.fill_input(self.flutter.enabled_inputs().first, cref)

    async def select_state(self, state: str) -> bool:
        """Pick a UF in the state dropdown. Returns False when no dropdown."""
        dropdown = self.flutter.locate(role="combobox")
        if not await dropdown.probe(2000):
            return False
        await dropdown.click()

        option = self.flutter.locate(role="option", text=re.compile(re.escape(state), re.IGNORECASE))
        if not await option.probe(2000):
            return False
        await option.click()
        return True

    async def _click_card(self, pattern: re.Pattern, timeout_ms: int = 3000) -> bool:
        card = self.flutter.locate(role="button", text=pattern)
        if not await card.probe(timeout_ms):
            return False
        await card.click()
        return True

    async def select_fitness_goal(self, goal: FitnessGoal) -> bool:
        return await self._click_card(GOAL_PATTERNS[goal])

    async def select_experience(self, level: ExperienceLevel) -> bool:
        return await self._click_card(re.compile(level, re.IGNORECASE))

    async def select_frequency(self, days: int) -> bool:
        """Select weekly training frequency, e.g. "3 vezes" or "3x"."""
        return await self._click_card(re.compile(rf"{days}.*vez|{days}x", re.IGNORECASE))

    async def fill_physical_data(self, weight: str, height: str) -> None:
        inputs = self.flutter.enabled_inputs()
        await self.flutter.fill_input(inputs.nth(0), weight)
        await self.flutter.fill_input(inputs.nth(1), height)

    async def complete_trainer_onboarding(self, cref: str | None = None) -> None:
        await self.wait_for_load()

        # Welcome
        await self.click_next()

        if cref:
            await self.fill_cref(cref)
            await self.click_next()
            remaining = TRAINER_OPTIONAL_STEPS - 1
        else:
            remaining = TRAINER_OPTIONAL_STEPS

        for _ in range(remaining):
            await self.advance()

        await self.click_complete()
        logger.info("trainer_onboarding_completed")

    async def complete_student_onboarding(self) -> None:
        await self.wait_for_load()

        # Welcome
        await self.click_next()

        # Fitness goal: first card in tab order
        if not await self.flutter.click_first_group():
            await self.flutter.locate(role="button").first.click()
        await self.click_next()

        for _ in range(STUDENT_OPTIONAL_STEPS):
            await self.advance()

        await self.click_complete()
        logger.info("student_onboarding_completed")

    async def is_on_dashboard(self) -> LookupResult:
        return await self.wait_for_url(DASHBOARD_URL, 10000)

    async def get_current_step_text(self) -> str | None:
        indicator = self.flutter.locate(text=STEP_INDICATOR)
        if not await indicator.probe(2000):
            return None
        return await indicator.text_content()
