from __future__ import annotations

from enum import Enum
from typing import Annotated, ClassVar, List, Literal, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    field_validator,
)
from pydantic.alias_generators import to_camel


class ActionKind(str, Enum):
    """Mutations a client may queue and replay against the server."""

    UPDATE_SET = "UPDATE_SET"
    SKIP_EXERCISE = "SKIP_EXERCISE"
    UNSKIP_EXERCISE = "UNSKIP_EXERCISE"
    COMPLETE_WORKOUT = "COMPLETE_WORKOUT"
    ADD_ADHOC = "ADD_ADHOC"
    ADD_SET = "ADD_SET"
    REMOVE_SET = "REMOVE_SET"
    UPDATE_UNIT = "UPDATE_UNIT"
    SAVE_EXERCISE = "SAVE_EXERCISE"


def _not_zero(value: int) -> int:
    # negative ids are offline placeholders and are skipped later
    if value == 0:
        raise ValueError("must be a positive integer")
    return value


Identifier = Annotated[StrictInt, AfterValidator(_not_zero)]
Unit = Literal["kg", "lbs"]
Weight = Optional[Annotated[float, Field(ge=0, allow_inf_nan=False)]]
Reps = Optional[Annotated[int, Field(ge=0)]]


class ActionPayload(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    primary_id: ClassVar[str] = ""

    def is_placeholder(self) -> bool:
        """True when the payload targets a record not yet created on the server."""
        if not self.primary_id:
            return False
        return getattr(self, self.primary_id) < 0


class UpdateSetPayload(ActionPayload):
    primary_id: ClassVar[str] = "set_log_id"

    set_log_id: Identifier
    weight: Weight = None
    reps: Reps = None
    unit: Optional[Unit] = None
    exercise_id: Optional[StrictInt] = None

    def fields(self) -> dict:
        """Return only the fields the client sent, ``None`` meaning clear."""
        data = {
            name: getattr(self, name)
            for name in ("weight", "reps", "unit")
            if name in self.model_fields_set
        }
        if data.get("unit", "") is None:
            data.pop("unit")
        return data

    def unit_exercise_id(self) -> int | None:
        if self.exercise_id is not None and self.exercise_id > 0:
            return self.exercise_id
        return None


class ExerciseLogPayload(ActionPayload):
    primary_id: ClassVar[str] = "exercise_log_id"

    exercise_log_id: Identifier


class SessionPayload(ActionPayload):
    primary_id: ClassVar[str] = "session_id"

    session_id: Identifier


class AddAdhocPayload(SessionPayload):
    exercise_name: StrictStr

    @field_validator("exercise_name")
    @classmethod
    def _strip_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("exercise name must be a non-empty string")
        return value


class SetLogPayload(ActionPayload):
    primary_id: ClassVar[str] = "set_log_id"

    set_log_id: Identifier


class UpdateUnitPayload(ActionPayload):
    primary_id: ClassVar[str] = "exercise_id"

    exercise_id: Identifier
    unit: Unit


class SavedSet(ActionPayload):
    primary_id: ClassVar[str] = "set_log_id"

    set_log_id: Identifier
    weight: Weight = None
    reps: Reps = None
    unit: Optional[Unit] = None


class SaveExercisePayload(ActionPayload):
    primary_id: ClassVar[str] = "exercise_log_id"

    exercise_log_id: Identifier
    exercise_id: Optional[StrictInt] = None
    sets: List[SavedSet]


PAYLOAD_MODELS: dict[ActionKind, type[ActionPayload]] = {
    ActionKind.UPDATE_SET: UpdateSetPayload,
    ActionKind.SKIP_EXERCISE: ExerciseLogPayload,
    ActionKind.UNSKIP_EXERCISE: ExerciseLogPayload,
    ActionKind.COMPLETE_WORKOUT: SessionPayload,
    ActionKind.ADD_ADHOC: AddAdhocPayload,
    ActionKind.ADD_SET: ExerciseLogPayload,
    ActionKind.REMOVE_SET: SetLogPayload,
    ActionKind.UPDATE_UNIT: UpdateUnitPayload,
    ActionKind.SAVE_EXERCISE: SaveExercisePayload,
}


def _describe(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err["loc"])
        msg = err["msg"].removeprefix("Value error, ")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts)


def parse_action(action: str, payload: dict) -> tuple[ActionKind, ActionPayload]:
    """Validate a queued mutation, raising ``ValueError`` with a readable message."""
    try:
        kind = ActionKind(action)
    except ValueError:
        raise ValueError("Unknown action")
    if not isinstance(payload, dict):
        raise ValueError("payload must be an object")
    try:
        return kind, PAYLOAD_MODELS[kind].model_validate(payload)
    except ValidationError as e:
        raise ValueError(_describe(e))
