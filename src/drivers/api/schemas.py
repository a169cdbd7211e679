"""Scenario payloads returned by POST /test/setup/{scenario}."""
from pydantic import BaseModel, ConfigDict


class ActorCredentials(BaseModel):
    """Known credentials for a seeded trainer or student."""

    model_config = ConfigDict(extra="allow")

    email: str
    password: str
    id: str
    name: str
    token: str


class ScenarioExercise(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    sets: int | None = None
    reps: str | None = None


class ScenarioWorkout(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: str
    label: str
    exercises: list[ScenarioExercise] = []


class CurrentExercise(BaseModel):
    id: str
    name: str
    current_set: int


class CompletedSet(BaseModel):
    set_number: int
    reps: int
    weight_kg: float


class ActiveSession(BaseModel):
    """Session already in progress (feedback_loop scenario)."""

    model_config = ConfigDict(extra="allow")

    id: str
    workout_id: str
    workout_name: str
    current_exercise: CurrentExercise
    completed_sets: list[CompletedSet] = []
    total_sets: int


class ScenarioData(BaseModel):
    """Opaque-ish bag of IDs and credentials threaded through a journey.

    Only the fields journeys read are typed; anything else the server
    returns is kept as extra data.
    """

    model_config = ConfigDict(extra="allow")

    trainer: ActorCredentials
    student: ActorCredentials | None = None
    students: list[ActorCredentials] = []
    organization_id: str
    plan_id: str | None = None
    assignment_id: str | None = None
    workouts: list[ScenarioWorkout] = []
    active_session: ActiveSession | None = None

    @property
    def first_workout(self) -> ScenarioWorkout:
        if not self.workouts:
            raise ValueError("Scenario has no workouts")
        return self.workouts[0]

    @property
    def org_headers(self) -> dict[str, str]:
        return {"X-Organization-ID": self.organization_id}
