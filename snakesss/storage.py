"""Persistence for the set of already-asked question ids."""

import logging
from pathlib import Path
from typing import Protocol, Union

import yaml

logger = logging.getLogger(__name__)


class UsedQuestionStore(Protocol):
    """Get/set access to the used question id set."""

    def load(self) -> set[str]: ...

    def save(self, ids: set[str]) -> None: ...


class MemoryUsedQuestionStore:
    """Keeps used ids in memory for the lifetime of the object."""

    def __init__(self, ids: Union[set[str], None] = None):
        self.ids: set[str] = set(ids or ())

    def load(self) -> set[str]:
        return set(self.ids)

    def save(self, ids: set[str]) -> None:
        self.ids = set(ids)


class YamlUsedQuestionStore:
    """Stores used ids in a YAML file so they survive between games."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def load(self) -> set[str]:
        if not self.path.exists():
            return set()
        with open(self.path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        ids = data.get("used_question_ids", []) if isinstance(data, dict) else data
        return {str(i) for i in ids or ()}

    def save(self, ids: set[str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump({"used_question_ids": sorted(ids)}, f)
        logger.debug("Saved %d used question ids to %s", len(ids), self.path)
