"""
Unit tests for the MedStudy data model and its wire format.

Run: pytest tests/unit/test_models.py -v
"""

import pytest

from src.medstudy import (
    AppState,
    Discipline,
    MalformedStateError,
    StoreResult,
    StudyRecord,
    StudySettings,
    ValidationError,
    ErrorKind,
)
from src.medstudy.study_store import decode_state, encode_state, parse_int, split_topics


@pytest.fixture
def sample_record_dict():
    """Provide a stored study record."""
    return {
        "id": 1709290000000,
        "disciplina": "Anatomy",
        "topico": "Bones",
        "totalQuestoes": 20,
        "questoesCorretas": 17,
        "data": "2024-03-01",
        "tempo": 50,
        "observacoes": "",
    }


class TestDiscipline:
    """Test Discipline conversion."""

    def test_defaults(self):
        d = Discipline(id=1, name="Anatomy")

        assert d.topics == ("General",)
        assert d.is_custom is False

    def test_wire_keys(self):
        d = Discipline(id=5, name="Anatomy", topics=("Bones",), is_custom=True)

        assert d.to_dict() == {"id": 5, "nome": "Anatomy", "assuntos": ["Bones"], "isCustom": True}
        assert Discipline.from_dict(d.to_dict()) == d

    def test_matches_ignores_case(self):
        assert Discipline(id=1, name="Anatomy").matches("aNATOMY")

    @pytest.mark.parametrize(
        "data",
        [
            {"id": "1", "nome": "A", "assuntos": ["x"]},
            {"id": True, "nome": "A", "assuntos": ["x"]},
            {"id": 1, "nome": "A", "assuntos": []},
            {"id": 1, "nome": "A", "assuntos": [3]},
            {"id": 1, "assuntos": ["x"]},
            {"id": 1, "nome": "A", "assuntos": ["x"], "isCustom": "false"},
            {"id": 1, "nome": "A", "assuntos": ["x"], "isCustom": 0},
        ],
    )
    def test_rejects_malformed(self, data):
        with pytest.raises(MalformedStateError):
            Discipline.from_dict(data)

    def test_missing_is_custom_means_builtin(self):
        d = Discipline.from_dict({"id": 1, "nome": "A", "assuntos": ["x"]})

        assert d.is_custom is False


class TestStudyRecord:
    """Test StudyRecord conversion."""

    def test_from_dict(self, sample_record_dict):
        record = StudyRecord.from_dict(sample_record_dict)

        assert record.discipline_name == "Anatomy"
        assert record.correct_answers == 17
        assert record.duration_minutes == 50
        assert record.to_dict() == sample_record_dict

    def test_is_immutable(self, sample_record_dict):
        record = StudyRecord.from_dict(sample_record_dict)

        with pytest.raises(AttributeError):
            record.topic = "Joints"

    def test_rejects_string_counts(self, sample_record_dict):
        sample_record_dict["totalQuestoes"] = "20"

        with pytest.raises(MalformedStateError):
            StudyRecord.from_dict(sample_record_dict)


class TestAppState:
    """Test whole-state encoding."""

    def test_default_document(self):
        assert AppState().to_dict() == {
            "disciplines": [],
            "customDisciplines": [],
            "studies": [],
            "settings": {"dailyGoal": 3},
        }

    def test_encode_decode(self, sample_record_dict):
        state = AppState(
            disciplines=[Discipline(id=1, name="Cardiology")],
            custom_disciplines=[Discipline(id=2, name="Anatomy", topics=("Bones",), is_custom=True)],
            studies=[StudyRecord.from_dict(sample_record_dict)],
            settings=StudySettings(daily_goal=4),
        )

        assert decode_state(encode_state(state)) == state

    def test_non_ascii_is_kept(self):
        state = AppState(custom_disciplines=[Discipline(id=1, name="Fisiologia", topics=("Coração",))])

        assert "Coração" in encode_state(state)

    def test_snapshot_is_independent(self):
        state = AppState()
        snap = state.snapshot()
        state.studies = [StudyRecord(id=1, discipline_name="A", topic="B")]

        state.restore(snap)

        assert state.studies == []

    def test_duplicate_record_ids_rejected(self, sample_record_dict):
        with pytest.raises(MalformedStateError):
            AppState.from_dict({"studies": [sample_record_dict, sample_record_dict]})

    @pytest.mark.parametrize("stored_goal, expected", [(-3, 1), (0, 1), (6, 6)])
    def test_settings_goal_below_one_reads_as_one(self, stored_goal, expected):
        assert StudySettings.from_dict({"dailyGoal": stored_goal}).daily_goal == expected

    def test_decode_rejects_invalid_json(self):
        with pytest.raises(MalformedStateError):
            decode_state("not json")


class TestHelpers:
    """Test coercion helpers."""

    @pytest.mark.parametrize(
        "raw, expected",
        [("42", 42), ("  7x", 7), ("+3", 3), ("-2", -2), ("1e3", 1), (2.9, 2), (float("nan"), 0), (True, 0), ("9" * 5000, 0)],
    )
    def test_parse_int(self, raw, expected):
        assert parse_int(raw) == expected

    def test_split_topics(self):
        assert split_topics("a, b ,,c") == ["a", "b", "c"]
        assert split_topics(" , ") == ["General"]
        assert split_topics(None) == ["General"]

    def test_store_result_truthiness(self):
        assert StoreResult.success("x")
        failed = StoreResult.failure(ValidationError("Discipline name is required"))

        assert not failed
        assert failed.error is ErrorKind.VALIDATION
        assert failed.message == "Discipline name is required"
