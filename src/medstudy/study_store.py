"""
StudyStore: owner of the MedStudy state.

Every mutation follows the same path:

    validate input -> mutate AppState -> serialize -> KeyValueStore.set

and returns a StoreResult. Expected conditions (blank name, duplicate
discipline) and storage failures are reported through the result; no
exception leaves a StudyStore operation.

When a write fails the in-memory change is rolled back to the snapshot
taken before the mutation, unless the store was created with
`rollback_on_failure=False`, in which case the change stays in memory
and is lost on the next load.
"""

from __future__ import annotations

import json
import math
import re
import time
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager

from loguru import logger

from .errors import (
    DuplicateError,
    MalformedStateError,
    MedStudyError,
    PersistenceError,
    StoreResult,
    ValidationError,
)
from .models import (
    DEFAULT_TOPIC,
    OTHER_TOPIC_LABEL,
    AppState,
    Discipline,
    StudyRecord,
    StudySettings,
    TopicChoice,
)
from .storage import KeyValueStore

STORAGE_KEY = "medstudy-data"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


# =============================================================================
# Coercion & Encoding
# =============================================================================


def parse_int(raw, default: int = 0) -> int:
    """
    Parse the leading integer of a form value.

    "12" -> 12, "12abc" -> 12, "3.7" -> 3, " 5" -> 5; anything without a
    leading integer returns `default`.
    """
    if raw is None or isinstance(raw, bool):
        return default
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if math.isfinite(raw) else default

    match = _LEADING_INT.match(str(raw))
    if not match:
        return default
    try:
        return int(match.group(1))
    except ValueError:
        # Beyond the interpreter's int string conversion limit
        return default


def split_topics(raw_topics_csv: str | None) -> list[str]:
    """Split a comma-separated topic list, dropping blank entries."""
    topics = [t.strip() for t in (raw_topics_csv or "").split(",")]
    return [t for t in topics if t] or [DEFAULT_TOPIC]


def encode_state(state: AppState, indent: int | None = None) -> str:
    return json.dumps(state.to_dict(), ensure_ascii=False, indent=indent)


def decode_state(text: str) -> AppState:
    """Decode a stored document, raising MalformedStateError on bad input."""
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, RecursionError, TypeError) as e:
        raise MalformedStateError(f"Stored data is not valid JSON: {e}") from e
    return AppState.from_dict(data)


# =============================================================================
# Study Store
# =============================================================================


class StudyStore:
    """
    Owns disciplines, study records and settings.

    Args:
        store: Key-value collaborator the state is persisted to
        key: Storage key of the state document
        seed_disciplines: Built-in disciplines used when none are persisted
        rollback_on_failure: Undo the in-memory change when a save fails
        clock: Time source in seconds, used for id assignment
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = STORAGE_KEY,
        seed_disciplines: Sequence[Discipline] | None = None,
        rollback_on_failure: bool = True,
        clock: Callable[[], float] = time.time,
    ):
        self._store = store
        self.key = key
        self._seed = list(seed_disciplines or [])
        self.rollback_on_failure = rollback_on_failure
        self._clock = clock
        self._state = AppState(disciplines=list(self._seed))

    # =========================================================================
    # State Access
    # =========================================================================

    @property
    def state(self) -> AppState:
        """Current state. Treat as read-only; mutate through operations."""
        return self._state

    @property
    def settings(self) -> StudySettings:
        return self._state.settings

    @property
    def custom_disciplines(self) -> tuple[Discipline, ...]:
        return tuple(self._state.custom_disciplines)

    @property
    def studies(self) -> tuple[StudyRecord, ...]:
        return tuple(self._state.studies)

    # =========================================================================
    # Persistence
    # =========================================================================

    def initialize(self) -> AppState:
        """
        Load persisted state.

        Missing or malformed data falls back to the default empty state;
        the problem is logged, never raised.
        """
        state = AppState()
        raw = self._read()

        if raw is not None:
            try:
                state = decode_state(raw)
                logger.debug(
                    f"Loaded {len(state.studies)} studies and "
                    f"{len(state.custom_disciplines)} custom disciplines"
                )
            except MalformedStateError as e:
                logger.warning(f"Discarding malformed data under '{self.key}': {e}")
                state = AppState()

        self._state = self._with_seed(state)
        return self._state

    def _with_seed(self, state: AppState) -> AppState:
        if state.disciplines or not self._seed:
            return state

        taken = {d.name.lower() for d in state.custom_disciplines}
        state.disciplines = [d for d in self._seed if d.name.lower() not in taken]
        return state

    def _read(self) -> str | None:
        try:
            return self._store.get(self.key)
        except Exception as e:
            logger.error(f"Failed to read '{self.key}': {e}")
            return None

    def _persist(self) -> None:
        try:
            saved = self._store.set(self.key, encode_state(self._state))
        except Exception as e:
            logger.error(f"Storage raised while saving '{self.key}': {e}")
            saved = False

        if not saved:
            raise PersistenceError("Failed to save study data")

    @contextmanager
    def _mutation(self) -> Iterator[AppState]:
        """Apply a change and persist it, rolling back if the save fails."""
        before = self._state.snapshot()
        try:
            yield self._state
            self._persist()
        except PersistenceError:
            if self.rollback_on_failure:
                self._state.restore(before)
            raise

    def _fail(self, action: str, error: MedStudyError) -> StoreResult:
        if isinstance(error, PersistenceError):
            logger.error(f"{action} failed: {error}")
        else:
            logger.warning(f"{action} rejected: {error}")
        return StoreResult.failure(error)

    def _next_id(self, existing: Sequence[Discipline] | Sequence[StudyRecord]) -> int:
        """Timestamp-derived id, bumped past any id already in use."""
        now_ms = int(self._clock() * 1000)
        return max([now_ms, *(item.id + 1 for item in existing)])

    # =========================================================================
    # Study Records
    # =========================================================================

    def add_study_record(
        self,
        discipline_name: str,
        topic: str | TopicChoice,
        total_questions=0,
        correct_answers=0,
        date: str = "",
        duration_minutes=0,
        notes: str = "",
        custom_topic: str = "",
    ) -> StoreResult:
        """
        Append a study record.

        Args:
            discipline_name: Discipline the session belongs to (by name)
            topic: A topic string, or TopicChoice.OTHER to use `custom_topic`
            total_questions: Questions attempted (coerced to int, default 0)
            correct_answers: Questions answered correctly (coerced likewise)
            date: Study date identifier
            duration_minutes: Time spent (coerced likewise)
            notes: Free-form notes
            custom_topic: Typed topic used with TopicChoice.OTHER

        Returns:
            StoreResult with the new StudyRecord as value
        """
        if topic is TopicChoice.OTHER:
            topic = (custom_topic or "").strip() or OTHER_TOPIC_LABEL

        record = StudyRecord(
            id=self._next_id(self._state.studies),
            discipline_name=discipline_name or "",
            topic=topic or "",
            total_questions=max(0, parse_int(total_questions)),
            correct_answers=max(0, parse_int(correct_answers)),
            date=date or "",
            duration_minutes=max(0, parse_int(duration_minutes)),
            notes=notes or "",
        )

        try:
            with self._mutation() as state:
                state.studies = [*state.studies, record]
        except PersistenceError as e:
            return self._fail("Add study", e)

        logger.debug(f"Added study {record.id} ({record.discipline_name} / {record.topic})")
        return StoreResult.success(record, "Study saved")

    def list_studies(self, discipline_name: str | None = None) -> tuple[StudyRecord, ...]:
        """Records in insertion order, optionally for one discipline name."""
        if not discipline_name:
            return self.studies
        return tuple(s for s in self._state.studies if s.discipline_name == discipline_name)

    # =========================================================================
    # Disciplines
    # =========================================================================

    def add_custom_discipline(self, name: str, raw_topics_csv: str = "") -> StoreResult:
        """
        Add a user-defined discipline.

        Topics come from a comma-separated string; an empty list becomes
        ["General"]. Names must be unique ignoring case across built-in and
        custom disciplines.
        """
        try:
            name = (name or "").strip()
            if not name:
                raise ValidationError("Discipline name is required")
            if any(d.matches(name) for d in self.list_all_disciplines()):
                raise DuplicateError(f"Discipline already exists: {name}")

            discipline = Discipline(
                id=self._next_id(self.list_all_disciplines()),
                name=name,
                topics=tuple(split_topics(raw_topics_csv)),
                is_custom=True,
            )
            with self._mutation() as state:
                state.custom_disciplines = [*state.custom_disciplines, discipline]
        except MedStudyError as e:
            return self._fail("Add discipline", e)

        logger.debug(f"Added discipline {discipline.id}: {discipline.name}")
        return StoreResult.success(discipline, "Discipline added")

    def delete_custom_discipline(self, discipline_id: int) -> StoreResult:
        """
        Remove a custom discipline by id.

        Unknown ids are a successful no-op. Study records that reference
        the discipline are kept.
        """
        try:
            with self._mutation() as state:
                state.custom_disciplines = [
                    d for d in state.custom_disciplines if d.id != discipline_id
                ]
        except PersistenceError as e:
            return self._fail("Delete discipline", e)

        return StoreResult.success(discipline_id, "Discipline deleted")

    def list_all_disciplines(self) -> tuple[Discipline, ...]:
        """Built-in disciplines followed by custom ones."""
        return (*self._state.disciplines, *self._state.custom_disciplines)

    def find_discipline(self, name: str) -> Discipline | None:
        for d in self.list_all_disciplines():
            if d.name == name:
                return d
        return None

    def list_topics_for_discipline(self, name: str) -> list[str | TopicChoice]:
        """Topics of the named discipline, always ending with TopicChoice.OTHER."""
        discipline = self.find_discipline(name) if name else None
        topics: list[str | TopicChoice] = list(discipline.topics) if discipline else []
        topics.append(TopicChoice.OTHER)
        return topics

    # =========================================================================
    # Settings
    # =========================================================================

    def update_daily_goal(self, raw_value) -> StoreResult:
        """Set the daily goal; unparsable or values below 1 become 1."""
        goal = parse_int(raw_value, default=1)
        if goal < 1:
            goal = 1

        try:
            with self._mutation() as state:
                state.settings = StudySettings(daily_goal=goal)
        except PersistenceError as e:
            return self._fail("Update daily goal", e)

        return StoreResult.success(goal, "Daily goal saved")

    # =========================================================================
    # Export / Import / Clear
    # =========================================================================

    def export_data(self) -> str:
        """Current state as a JSON document in the stored format."""
        return encode_state(self._state, indent=2)

    def import_data(self, text: str) -> StoreResult:
        """Replace the whole state with a previously exported document."""
        try:
            imported = self._with_seed(decode_state(text))
            with self._mutation() as state:
                state.restore(imported)
        except MedStudyError as e:
            return self._fail("Import", e)

        logger.info(f"Imported {len(imported.studies)} studies")
        return StoreResult.success(imported, "Data imported")

    def clear_data(self) -> StoreResult:
        """Drop custom disciplines, studies and settings; keep built-ins."""
        try:
            with self._mutation() as state:
                state.custom_disciplines = []
                state.studies = []
                state.settings = StudySettings()
        except PersistenceError as e:
            return self._fail("Clear data", e)

        logger.info("Cleared study data")
        return StoreResult.success(message="Data cleared")
