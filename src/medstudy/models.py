"""
MedStudy data model.

Plain dataclasses for the study tracker state plus the JSON wire format
used by the persisted `medstudy-data` document:

- Discipline: subject area with its topic list (built-in or custom)
- StudyRecord: one logged study session (immutable)
- StudySettings: the daily goal
- AppState: everything above, owned by a single StudyStore

Field names on the wire follow the original storage layout
(`nome`, `assuntos`, `disciplina`, `topico`, ...) so existing data loads
unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from .errors import MalformedStateError

DEFAULT_TOPIC = "General"
OTHER_TOPIC_LABEL = "Other"
DEFAULT_DAILY_GOAL = 3


class TopicChoice(Enum):
    """Non-topic entries of a topic list."""

    OTHER = "other"  # User types a topic that is not in the list


# =============================================================================
# Field Checks
# =============================================================================


def _require(data: dict, key: str, kind: type | tuple[type, ...], what: str):
    """Fetch a required field, rejecting wrong types (bool is not an int)."""
    if key not in data:
        raise MalformedStateError(f"{what} is missing '{key}'")
    value = data[key]
    if isinstance(value, bool) and kind is not bool:
        raise MalformedStateError(f"{what} field '{key}' must not be a boolean")
    if not isinstance(value, kind):
        raise MalformedStateError(f"{what} field '{key}' has type {type(value).__name__}")
    return value


def _require_object(value, what: str) -> dict:
    if not isinstance(value, dict):
        raise MalformedStateError(f"{what} must be an object, got {type(value).__name__}")
    return value


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class Discipline:
    """A subject area and its ordered topics."""

    id: int
    name: str
    topics: tuple[str, ...] = (DEFAULT_TOPIC,)
    is_custom: bool = False

    def matches(self, name: str) -> bool:
        """Case-insensitive name comparison used for uniqueness checks."""
        return self.name.lower() == name.lower()

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "nome": self.name,
            "assuntos": list(self.topics),
            "isCustom": self.is_custom,
        }

    @classmethod
    def from_dict(cls, data: dict) -> Discipline:
        data = _require_object(data, "Discipline")
        topics = _require(data, "assuntos", list, "Discipline")
        if not topics or not all(isinstance(t, str) for t in topics):
            raise MalformedStateError("Discipline topics must be a non-empty list of strings")

        return cls(
            id=_require(data, "id", int, "Discipline"),
            name=_require(data, "nome", str, "Discipline"),
            topics=tuple(topics),
            is_custom=_require(data, "isCustom", bool, "Discipline") if "isCustom" in data else False,
        )


@dataclass(frozen=True)
class StudyRecord:
    """
    A single logged study session.

    `discipline_name` is a weak reference: the discipline may have been
    deleted since, and the record stays valid.
    """

    id: int
    discipline_name: str
    topic: str
    total_questions: int = 0
    correct_answers: int = 0
    date: str = ""
    duration_minutes: int = 0
    notes: str = ""

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "disciplina": self.discipline_name,
            "topico": self.topic,
            "totalQuestoes": self.total_questions,
            "questoesCorretas": self.correct_answers,
            "data": self.date,
            "tempo": self.duration_minutes,
            "observacoes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict) -> StudyRecord:
        data = _require_object(data, "StudyRecord")
        return cls(
            id=_require(data, "id", int, "StudyRecord"),
            discipline_name=_require(data, "disciplina", str, "StudyRecord"),
            topic=_require(data, "topico", str, "StudyRecord"),
            total_questions=_require(data, "totalQuestoes", int, "StudyRecord"),
            correct_answers=_require(data, "questoesCorretas", int, "StudyRecord"),
            date=_require(data, "data", str, "StudyRecord"),
            duration_minutes=_require(data, "tempo", int, "StudyRecord"),
            notes=_require(data, "observacoes", str, "StudyRecord"),
        )


@dataclass(frozen=True)
class StudySettings:
    """User settings. Only the daily goal for now."""

    daily_goal: int = DEFAULT_DAILY_GOAL

    def to_dict(self) -> dict:
        return {"dailyGoal": self.daily_goal}

    @classmethod
    def from_dict(cls, data: dict) -> StudySettings:
        data = _require_object(data, "Settings")
        goal = _require(data, "dailyGoal", int, "Settings")
        # Older saves may hold a goal below 1; read it the way updates coerce it
        return cls(daily_goal=max(1, goal))


@dataclass
class AppState:
    """
    Complete application state.

    Collections are replaced, never mutated in place, so a shallow
    `snapshot()` is enough to restore a previous state.
    """

    disciplines: list[Discipline] = field(default_factory=list)
    custom_disciplines: list[Discipline] = field(default_factory=list)
    studies: list[StudyRecord] = field(default_factory=list)
    settings: StudySettings = field(default_factory=StudySettings)

    def snapshot(self) -> AppState:
        return AppState(
            disciplines=list(self.disciplines),
            custom_disciplines=list(self.custom_disciplines),
            studies=list(self.studies),
            settings=self.settings,
        )

    def restore(self, other: AppState) -> None:
        self.disciplines = list(other.disciplines)
        self.custom_disciplines = list(other.custom_disciplines)
        self.studies = list(other.studies)
        self.settings = other.settings

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "disciplines": [d.to_dict() for d in self.disciplines],
            "customDisciplines": [d.to_dict() for d in self.custom_disciplines],
            "studies": [s.to_dict() for s in self.studies],
            "settings": self.settings.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> AppState:
        """
        Create from the persisted document.

        Absent top-level keys take their defaults; anything present must
        be well-formed or MalformedStateError is raised.
        """
        data = _require_object(data, "Stored state")

        def _list(key: str) -> list:
            value = data.get(key, [])
            if not isinstance(value, list):
                raise MalformedStateError(f"Stored state '{key}' must be a list")
            return value

        settings = data.get("settings")
        state = cls(
            disciplines=[Discipline.from_dict(d) for d in _list("disciplines")],
            custom_disciplines=[Discipline.from_dict(d) for d in _list("customDisciplines")],
            studies=[StudyRecord.from_dict(s) for s in _list("studies")],
            settings=StudySettings() if settings is None else StudySettings.from_dict(settings),
        )
        state.check_invariants()
        return state

    def check_invariants(self) -> None:
        """Raise MalformedStateError on duplicate discipline names or record ids."""
        seen_names: set[str] = set()
        for d in [*self.disciplines, *self.custom_disciplines]:
            if d.name.lower() in seen_names:
                raise MalformedStateError(f"Duplicate discipline name: {d.name}")
            seen_names.add(d.name.lower())

        seen_ids: set[int] = set()
        for s in self.studies:
            if s.id in seen_ids:
                raise MalformedStateError(f"Duplicate study record id: {s.id}")
            seen_ids.add(s.id)
