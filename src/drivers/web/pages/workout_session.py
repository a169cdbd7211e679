"""Workout Session Page Object.

Handles the active workout view for both Student and Trainer in co-training.
"""
import re

import structlog

from src.drivers.web.pages.base import BasePage
from src.drivers.web.semantics import LookupResult

logger = structlog.get_logger(__name__)

SESSION_TEXT = re.compile(r"treino ativo|exercício|série", re.IGNORECASE)
WAITING_FOR_TRAINER = re.compile(r"aguardando|waiting", re.IGNORECASE)
TRAINER_CONNECTED = re.compile(r"personal conectado|trainer connected", re.IGNORECASE)
EXERCISE_HEADING = re.compile(r"supino|rosca|agachamento|crucifixo|triceps|puxada|remada", re.IGNORECASE)
COTRAINING_MODE = re.compile(r"treinar com personal|co-training", re.IGNORECASE)
COMPLETE_SET = re.compile(r"concluir|complete|próxima|completar série", re.IGNORECASE)
ADJUSTMENT_NOTIFICATION = re.compile(r"sugestão do personal|ajuste do personal|personal sugere", re.IGNORECASE)

# "+5kg", "27.5 kg", "30,0kg"
WEIGHT_KG = re.compile(r"([+-]?\d+(?:[.,]\d+)?)\s*kg", re.IGNORECASE)


def parse_weight_kg(text: str | None) -> float | None:
    """First weight in kg mentioned in ``text``."""
    if not text:
        return None
    match = WEIGHT_KG.search(text)
    if not match:
        return None
    return float(match.group(1).replace(",", "."))


def _format_number(value: float) -> str:
    return str(int(value)) if float(value).is_integer() else str(value)


class WorkoutSessionPage(BasePage):
    async def wait_for_load(self, timeout_ms: int = 10000) -> None:
        await self.flutter.locate(label="workout-session", text=SESSION_TEXT).wait_for(timeout_ms)

    async def select_cotraining_mode(self) -> None:
        """Start in co-training mode and wait for the "waiting for trainer" state."""
        await self.flutter.locate(label="cotraining-mode", role="button", text=COTRAINING_MODE).click()
        await self.flutter.locate(text=WAITING_FOR_TRAINER).wait_for(5000)

    async def is_trainer_connected(self, timeout_ms: int = 2000) -> LookupResult:
        return await self.flutter.locate(label="trainer-connected", text=TRAINER_CONNECTED).probe(timeout_ms)

    async def get_current_exercise(self) -> str | None:
        exercise = self.flutter.locate(label="current-exercise", role="heading", text=EXERCISE_HEADING)
        if not await exercise.probe(2000):
            return None
        return await exercise.text_content()

    async def complete_set(self, reps: int, weight: float) -> None:
        reps_input = self.flutter.locate(
            label="reps-input", role="spinbutton", text=re.compile(r"reps|repetições", re.I)
        )
        weight_input = self.flutter.locate(
            label="weight-input", role="spinbutton", text=re.compile(r"peso|weight", re.I)
        )

        await reps_input.fill(str(reps))
        await weight_input.fill(_format_number(weight))

        await self.flutter.locate(label="complete-set", role="button", text=COMPLETE_SET).click()
        logger.info("set_completed", reps=reps, weight=weight)

    async def has_set_completed(self, set_number: int, timeout_ms: int = 5000) -> LookupResult:
        """Set ``set_number`` shows as done in the set list."""
        done = re.compile(rf"série {set_number}\b.*complet|set {set_number}\b.*completed", re.IGNORECASE)
        return await self.flutter.locate(label=f"set-completed-{set_number}", text=done).probe(timeout_ms)

    # ==================
    # Co-training adjustment methods (for Trainer view)
    # ==================

    async def send_adjustment(self, weight: float, note: str | None = None) -> None:
        """Suggest a weight (and optional note) to the student."""
        await self.flutter.locate(
            label="suggest-adjustment", role="button", text=re.compile(r"sugerir ajuste|suggest", re.I)
        ).click()

        await self.flutter.locate(
            label="suggested-weight", role="spinbutton", text=re.compile(r"peso sugerido", re.I)
        ).fill(_format_number(weight))

        if note:
            await self.flutter.locate(
                label="adjustment-note", role="textbox", text=re.compile(r"nota|note", re.I)
            ).fill(note)

        await self.flutter.locate(
            label="send-adjustment", role="button", text=re.compile(r"enviar|send", re.I)
        ).click()
        logger.info("adjustment_sent", weight=weight, has_note=bool(note))

    # ==================
    # Adjustment notification methods (for Student view)
    # ==================

    def adjustment_notification(self):
        return self.flutter.locate(label="adjustment-notification", text=ADJUSTMENT_NOTIFICATION)

    async def wait_for_adjustment(self, timeout_ms: int = 10000) -> LookupResult:
        return await self.adjustment_notification().probe(timeout_ms)

    async def get_adjustment_weight(self) -> float | None:
        notification = self.adjustment_notification()
        if not await notification.probe(2000):
            return None
        return parse_weight_kg(await notification.text_content())

    async def apply_adjustment(self) -> None:
        await self.flutter.locate(
            label="apply-adjustment", role="button", text=re.compile(r"aplicar|apply", re.I)
        ).click()

    async def dismiss_adjustment(self) -> None:
        await self.flutter.locate(
            label="dismiss-adjustment", role="button", text=re.compile(r"ignorar|dismiss|cancel", re.I)
        ).click()

    # ==================
    # Session chat
    # ==================

    async def send_message(self, message: str) -> None:
        chat = self.flutter.locate(label="session-chat", role="button", text=re.compile(r"chat|mensagem", re.I))
        if await chat.probe(2000):
            await chat.click()

        await self.flutter.locate(
            label="message-input", role="textbox", text=re.compile(r"mensagem", re.I)
        ).fill(message)
        await self.flutter.locate(
            label="send-message", role="button", text=re.compile(r"enviar|send", re.I)
        ).click()

    async def has_message(self, message: str, timeout_ms: int = 5000) -> LookupResult:
        return await self.flutter.locate(text=message).probe(timeout_ms)
