"""Immutable translation versions and the per-file version history.

Every successful job appends a new ``TranslationVersion``; nothing is ever
edited in place. Writers publish a fresh mapping under a lock, readers take
the current mapping without locking.
"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping

from subweave.core.config import TranslationSettings


def _version_id() -> str:
    return f"ver_{uuid.uuid4().hex[:12]}"


@dataclass(frozen=True)
class TranslationVersion:
    """A named snapshot of one completed translation of a file."""

    name: str
    settings: TranslationSettings
    content: str
    id: str = field(default_factory=_version_id)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class VersionStore:
    """Append-only version history, one tuple of versions per file id."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._versions: Mapping[str, tuple[TranslationVersion, ...]] = MappingProxyType({})
        # Highest version number handed out per file; removals never lower it.
        self._numbers: dict[str, int] = {}

    def _publish(self, file_id: str, versions: tuple[TranslationVersion, ...]) -> None:
        updated = dict(self._versions)
        if versions:
            updated[file_id] = versions
        else:
            updated.pop(file_id, None)
        self._versions = MappingProxyType(updated)

    def commit(
        self,
        file_id: str,
        settings: TranslationSettings,
        content: str,
        name: str | None = None,
    ) -> TranslationVersion:
        """Append a new version for ``file_id`` and return it.

        When ``name`` is omitted the version is named after its position in
        the file's history, the target language and the model. Numbers are
        never reused, even after a version is removed.
        """
        with self._lock:
            existing = self._versions.get(file_id, ())
            number = self._numbers.get(file_id, 0) + 1
            self._numbers[file_id] = number
            if name is None:
                name = f"v{number} {settings.target_language} ({settings.model})"
            version = TranslationVersion(name=name, settings=settings, content=content)
            self._publish(file_id, existing + (version,))
        return version

    def versions(self, file_id: str) -> tuple[TranslationVersion, ...]:
        return self._versions.get(file_id, ())

    def latest(self, file_id: str) -> TranslationVersion | None:
        versions = self.versions(file_id)
        return versions[-1] if versions else None

    def remove_version(self, file_id: str, version_id: str) -> bool:
        """Delete one version on explicit user request.

        Returns:
            True if a version was removed.
        """
        with self._lock:
            existing = self._versions.get(file_id, ())
            kept = tuple(v for v in existing if v.id != version_id)
            if len(kept) == len(existing):
                return False
            self._publish(file_id, kept)
        return True

    def snapshot(self) -> Mapping[str, tuple[TranslationVersion, ...]]:
        """Read-only view of every file's history at this instant."""
        return self._versions
