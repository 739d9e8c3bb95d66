"""
MedStudy: single-user study tracker.

Records study sessions, manages custom disciplines and their topics and
keeps a daily study goal, persisted through a local key-value store.

Components:
- Discipline / StudyRecord / StudySettings / AppState: data model
- StudyStore: state owner and all operations
- JsonFileStore / MemoryStore: key-value persistence
- load_seed_disciplines: built-in discipline loading
- cli: terminal interface
"""

from .errors import (
    DuplicateError,
    ErrorKind,
    MalformedStateError,
    MedStudyError,
    PersistenceError,
    StoreResult,
    ValidationError,
)
from .models import AppState, Discipline, StudyRecord, StudySettings, TopicChoice
from .seed import load_seed_disciplines
from .storage import JsonFileStore, KeyValueStore, MemoryStore
from .study_store import STORAGE_KEY, StudyStore

__all__ = [
    # Data model
    "AppState",
    "Discipline",
    "StudyRecord",
    "StudySettings",
    "TopicChoice",
    # Store
    "StudyStore",
    "STORAGE_KEY",
    "load_seed_disciplines",
    # Persistence
    "KeyValueStore",
    "JsonFileStore",
    "MemoryStore",
    # Errors
    "ErrorKind",
    "StoreResult",
    "MedStudyError",
    "ValidationError",
    "DuplicateError",
    "PersistenceError",
    "MalformedStateError",
]
