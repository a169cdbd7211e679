"""Dashboard Page Object.

Handles both Trainer and Student dashboard views.

Semantic labels (Semantics(label: '...')) are tried first, then the
role + text filter, then free text, per SemanticLocator.
"""
import re

import structlog

from src.drivers.web.pages.base import BasePage
from src.drivers.web.semantics import LookupResult

logger = structlog.get_logger(__name__)

DASHBOARD_URL = re.compile(r"dashboard|home|org-selector")
ACTIVE_STUDENTS = re.compile(r"alunos? recentes", re.IGNORECASE)
ASSIGNED_PLAN = re.compile(r"seu plano|your plan|treino de hoje", re.IGNORECASE)
START_WORKOUT = re.compile(r"iniciar.*treino|start.*workout", re.IGNORECASE)
SUGGESTED_WORKOUT = re.compile(r"sugerido", re.IGNORECASE)
JOIN_SESSION = re.compile(r"acompanhar|join", re.IGNORECASE)
COTRAINING_MODE = re.compile(r"treinar com personal", re.IGNORECASE)
SOLO_MODE = re.compile(r"treinar sozinho", re.IGNORECASE)


class DashboardPage(BasePage):
    async def wait_for_load(self) -> None:
        await self.page.wait_for_url(DASHBOARD_URL, timeout=self.config.NAVIGATION_TIMEOUT_MS)
        await self.flutter.wait_for_flutter()

    async def is_displayed(self) -> bool:
        url = self.page.url
        return "dashboard" in url or "home" in url

    async def get_user_name(self) -> str | None:
        name = self.flutter.locate(label="user-name", role="heading")
        if not await name.probe(2000):
            return None
        return await name.text_content()

    # ==================
    # Trainer-specific methods
    # ==================

    def student_card(self, student_name: str):
        return self.flutter.locate(label=f"student-card-{student_name}", text=student_name)

    async def has_active_student(self, student_name: str) -> LookupResult:
        """Active students section lists ``student_name``."""
        section = self.flutter.locate(label="active-students", text=ACTIVE_STUDENTS)
        result = await section.probe(5000)
        if not result:
            return result
        return await self.student_card(student_name).probe(2000)

    async def join_student_session(self, student_name: str) -> None:
        """Open the student's card and join their co-training session."""
        await self.student_card(student_name).click()
        await self.flutter.locate(label="join-session", role="button", text=JOIN_SESSION).click()
        logger.info("trainer_join_clicked", student=student_name)

    # ==================
    # Student-specific methods
    # ==================

    async def has_assigned_plan(self) -> LookupResult:
        return await self.flutter.locate(label="assigned-plan", text=ASSIGNED_PLAN).probe(5000)

    async def start_workout(self, workout_name: str | None = None, workout_id: str | None = None) -> None:
        """Open the start-workout sheet for a workout.

        With ``workout_id`` the workout detail route is opened directly;
        otherwise the "Iniciar Treino" quick action is used and the named (or
        suggested) workout is picked from the sheet.
        """
        if workout_id:
            await self.page.goto(f"/workouts/{workout_id}")
            await self.flutter.wait_for_flutter()
            await self.flutter.locate(label="start-workout", role="button", text=START_WORKOUT).click()
            return

        await self.flutter.locate(
            label="quick-action-iniciar-treino", role="button", text=START_WORKOUT
        ).click()

        if workout_name:
            await self.flutter.locate(text=workout_name).click()
        else:
            await self.flutter.locate(label="workout-card-treino-a", text=SUGGESTED_WORKOUT).click()

    def cotraining_option(self):
        return self.flutter.locate(label="cotraining-mode", role="button", text=COTRAINING_MODE)

    def solo_option(self):
        return self.flutter.locate(label="start-workout-solo", role="button", text=SOLO_MODE)

    async def has_cotraining_option(self) -> LookupResult:
        return await self.cotraining_option().probe(5000)

    async def has_solo_option(self) -> LookupResult:
        return await self.solo_option().probe(5000)

    async def enable_cotraining_mode(self) -> None:
        await self.cotraining_option().click()

    async def start_workout_solo(self) -> None:
        await self.solo_option().click()

    async def select_training_mode(self, cotraining: bool) -> None:
        if cotraining:
            await self.enable_cotraining_mode()
        else:
            await self.start_workout_solo()
        logger.info("training_mode_selected", cotraining=cotraining)
