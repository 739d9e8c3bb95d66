"""
Built-in discipline seed data.

The seed file is a JSON list of disciplines in the stored shape:

    [{"id": 1, "nome": "Anatomy", "assuntos": ["Bones", "Joints"]}, ...]

Entries are always loaded as built-in (isCustom false).
"""

from __future__ import annotations

import json
from dataclasses import replace
from pathlib import Path

from loguru import logger

from .errors import MalformedStateError
from .models import Discipline


def load_seed_disciplines(path: Path | None) -> list[Discipline]:
    """
    Load built-in disciplines from a seed file.

    Args:
        path: Seed JSON file, or None for no built-ins

    Returns:
        Disciplines in file order; empty if the file is missing or invalid
    """
    if path is None:
        return []
    if not path.exists():
        logger.warning(f"Seed file not found: {path}")
        return []

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise MalformedStateError("seed file must contain a list")
        disciplines = [replace(Discipline.from_dict(d), is_custom=False) for d in data]
    except (OSError, json.JSONDecodeError, MalformedStateError) as e:
        logger.warning(f"Ignoring seed file {path}: {e}")
        return []

    seen: set[str] = set()
    unique = []
    for d in disciplines:
        if d.name.lower() in seen:
            logger.warning(f"Skipping duplicate seed discipline: {d.name}")
            continue
        seen.add(d.name.lower())
        unique.append(d)

    logger.debug(f"Loaded {len(unique)} seed disciplines from {path}")
    return unique
