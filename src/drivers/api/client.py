"""Client for the myfit-api E2E server (tests.e2e.server).

Seeds scenarios, resets state and drives co-training sessions from the
backend side, so browser journeys can verify what the other actor sees.
"""
from collections.abc import Callable
from typing import Any

import httpx
import structlog

from src.config.settings import Settings, settings
from src.core.exceptions import (
    BackendUnavailableError,
    ScenarioNotFoundError,
    TestControlError,
)
from src.core.polling import poll_until
from src.drivers.api.schemas import ScenarioData

logger = structlog.get_logger(__name__)


class TestControlClient:
    """Async client for /test/* and the co-training session endpoints."""

    __test__ = False  # not a pytest class

    def __init__(
        self,
        base_url: str | None = None,
        *,
        config: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or settings
        self.base_url = (base_url or self.config.E2E_API_URL).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.config.API_TIMEOUT_S,
            transport=transport,
            follow_redirects=True,
        )

    async def __aenter__(self) -> "TestControlClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def sessions_path(self) -> str:
        return f"{self.config.API_V1_PREFIX}/workouts/sessions"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        token: str | None = None,
        org_id: str | None = None,
        json: dict | None = None,
        params: dict | None = None,
    ) -> Any:
        headers = {}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if org_id:
            headers["X-Organization-ID"] = org_id

        try:
            response = await self._client.request(
                method, path, headers=headers, json=json, params=params
            )
        except httpx.TransportError as e:
            raise BackendUnavailableError(
                f"E2E server unreachable at {self.base_url}: {e}"
            ) from e

        if response.is_error:
            raise TestControlError(
                f"{method} {path} failed with {response.status_code}: {response.text}",
                status_code=response.status_code,
            )

        if not response.content:
            return None
        return response.json()

    # ------------------------------------------------------------------
    # Test control
    # ------------------------------------------------------------------

    async def health(self) -> dict:
        return await self._request("GET", "/test/health")

    async def is_available(self) -> bool:
        """True when the E2E server answers its health check."""
        try:
            data = await self.health()
        except BackendUnavailableError:
            return False
        return data.get("status") == "ok"

    async def setup_scenario(self, name: str) -> ScenarioData:
        """Seed a named scenario. Failures are fatal for the journey."""
        try:
            payload = await self._request("POST", f"/test/setup/{name}")
        except TestControlError as e:
            if e.status_code == 404:
                raise ScenarioNotFoundError(str(e), status_code=404) from e
            raise

        scenario = ScenarioData.model_validate(payload["data"])
        logger.info(
            "scenario_ready",
            scenario=name,
            trainer=scenario.trainer.email,
            student=scenario.student.email if scenario.student else None,
        )
        return scenario

    async def reset(self) -> None:
        await self._request("POST", "/test/reset")
        logger.info("database_reset")

    async def reset_quietly(self) -> bool:
        """Reset for teardown paths, where a missing server is not a failure."""
        try:
            await self.reset()
        except TestControlError as e:
            logger.warning("database_reset_skipped", error=str(e))
            return False
        return True

    # ------------------------------------------------------------------
    # Co-training sessions
    # ------------------------------------------------------------------

    async def start_session(
        self,
        token: str,
        workout_id: str,
        *,
        is_shared: bool = False,
        org_id: str | None = None,
    ) -> dict:
        return await self._request(
            "POST",
            self.sessions_path,
            token=token,
            org_id=org_id,
            json={"workout_id": workout_id, "is_shared": is_shared},
        )

    async def get_session(self, token: str, session_id: str) -> dict:
        return await self._request("GET", f"{self.sessions_path}/{session_id}", token=token)

    async def join_session(self, token: str, session_id: str, *, org_id: str | None = None) -> dict:
        return await self._request(
            "POST", f"{self.sessions_path}/{session_id}/join", token=token, org_id=org_id
        )

    async def leave_session(self, token: str, session_id: str) -> dict:
        return await self._request("POST", f"{self.sessions_path}/{session_id}/leave", token=token)

    async def update_session_status(self, token: str, session_id: str, status: str) -> dict:
        return await self._request(
            "PUT",
            f"{self.sessions_path}/{session_id}/status",
            token=token,
            json={"status": status},
        )

    async def send_adjustment(
        self,
        token: str,
        session_id: str,
        exercise_id: str,
        *,
        suggested_weight_kg: float | None = None,
        suggested_reps: int | None = None,
        set_number: int | None = None,
        note: str | None = None,
    ) -> dict:
        return await self._request(
            "POST",
            f"{self.sessions_path}/{session_id}/adjustments",
            token=token,
            json={
                "session_id": session_id,
                "exercise_id": exercise_id,
                "set_number": set_number,
                "suggested_weight_kg": suggested_weight_kg,
                "suggested_reps": suggested_reps,
                "note": note,
            },
        )

    async def send_message(self, token: str, session_id: str, message: str) -> dict:
        return await self._request(
            "POST",
            f"{self.sessions_path}/{session_id}/messages",
            token=token,
            json={"session_id": session_id, "message": message},
        )

    async def list_messages(self, token: str, session_id: str, limit: int = 50) -> list[dict]:
        return await self._request(
            "GET",
            f"{self.sessions_path}/{session_id}/messages",
            token=token,
            params={"limit": limit},
        )

    async def add_set(
        self,
        token: str,
        session_id: str,
        exercise_id: str,
        *,
        set_number: int,
        reps_completed: int,
        weight_kg: float | None = None,
    ) -> dict:
        return await self._request(
            "POST",
            f"{self.sessions_path}/{session_id}/sets",
            token=token,
            json={
                "exercise_id": exercise_id,
                "set_number": set_number,
                "reps_completed": reps_completed,
                "weight_kg": weight_kg,
            },
        )

    # ------------------------------------------------------------------
    # Rendezvous between actors
    # ------------------------------------------------------------------

    async def wait_for_session(
        self,
        token: str,
        session_id: str,
        condition: Callable[[dict], bool],
        *,
        timeout: float | None = None,
        description: str = "session state",
    ) -> dict:
        """Poll the session until ``condition`` holds for it.

        Replaces reload-and-sleep between the two actors: whichever side acted,
        the other waits here for the backend to reflect it.
        """
        return await poll_until(
            lambda: self.get_session(token, session_id),
            condition,
            timeout=self.config.RENDEZVOUS_TIMEOUT_S if timeout is None else timeout,
            interval=self.config.RENDEZVOUS_INTERVAL_S,
            description=description,
        )

    async def wait_for_message(
        self,
        token: str,
        session_id: str,
        text: str,
        *,
        timeout: float | None = None,
    ) -> dict:
        """Poll session messages until one with ``text`` arrives."""
        messages = await poll_until(
            lambda: self.list_messages(token, session_id),
            lambda items: any(m.get("message") == text for m in items),
            timeout=self.config.RENDEZVOUS_TIMEOUT_S if timeout is None else timeout,
            interval=self.config.RENDEZVOUS_INTERVAL_S,
            description=f"message {text!r}",
        )
        return next(m for m in messages if m.get("message") == text)

    async def wait_until_trainer_joined(self, token: str, session_id: str, trainer_id: str) -> dict:
        return await self.wait_for_session(
            token,
            session_id,
            lambda s: s.get("trainer_id") == trainer_id,
            description="trainer joined",
        )

    async def wait_for_set(
        self,
        token: str,
        session_id: str,
        set_number: int,
        *,
        timeout: float | None = None,
    ) -> dict:
        session = await self.wait_for_session(
            token,
            session_id,
            lambda s: any(st.get("set_number") == set_number for st in s.get("sets", [])),
            timeout=timeout,
            description=f"set {set_number} recorded",
        )
        return next(st for st in session["sets"] if st["set_number"] == set_number)
