"""Static group directory.

Membership is supplied from configuration at startup and never
changes while the engine runs.
"""

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import FrozenSet, Iterable, List, Mapping, Optional

logger = logging.getLogger(__name__)


class GroupDirectory:
    """Lookup from group identifier to its member usernames."""

    def __init__(self, groups: Optional[Mapping[str, Iterable[str]]] = None):
        self._groups = MappingProxyType(
            {group_id: frozenset(members) for group_id, members in (groups or {}).items()}
        )

    def members(self, group_id: str) -> FrozenSet[str]:
        """Members of *group_id*; empty for unknown identifiers."""
        return self._groups.get(group_id, frozenset())

    def group_ids(self) -> List[str]:
        return sorted(self._groups)

    def __contains__(self, group_id: str) -> bool:
        return group_id in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    @classmethod
    def from_file(cls, path: str) -> "GroupDirectory":
        """Load ``{"group-id": ["user", ...], ...}`` from a JSON file."""
        with open(Path(path), encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Group seed file {path} must contain a JSON object")
        return cls(data)

    @classmethod
    def from_settings(cls, settings) -> "GroupDirectory":
        """Merge groups from ``settings.groups`` and the optional seed file.

        Entries in ``settings.groups`` win over the file for the same id.
        """
        groups: dict = {}
        if settings.groups_file:
            groups.update(cls.from_file(settings.groups_file)._groups)
        groups.update(settings.groups)

        for group_id in groups:
            if not group_id.startswith(settings.group_prefix):
                logger.warning(
                    "Group %s lacks prefix %r and will never be addressed as a group",
                    group_id,
                    settings.group_prefix,
                )

        directory = cls(groups)
        logger.info("Loaded %d groups: %s", len(directory), ", ".join(directory.group_ids()))
        return directory
