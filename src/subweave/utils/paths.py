"""Output file naming for translated versions."""

from __future__ import annotations

import re
from pathlib import Path


def sanitize_export_segment(name: str, fallback: str = "version") -> str:
    """Reduce a version name to ``[a-z0-9_-]`` for use in a file name."""
    text = re.sub(r"\s+", "_", name.strip())
    text = re.sub(r"[^a-zA-Z0-9_-]", "", text).lower()
    return text or fallback


def _sanitize_base_name(name: str) -> str:
    text = re.sub(r'[\\/:*?"<>|]', "_", name.strip())
    text = re.sub(r"\s+", " ", text)
    return text or "file"


def build_unique_export_name(base: str, version_name: str, ext: str, used: set[str]) -> str:
    """Build ``<base>_<version>.<ext>``, suffixed ``_2``, ``_3``... if taken.

    ``used`` holds lowercased names already handed out and is updated with
    the returned name.
    """
    safe_ext = ext.lstrip(".").lower() or "txt"
    stem = f"{_sanitize_base_name(base)}_{sanitize_export_segment(version_name)}"

    index = 1
    candidate = f"{stem}.{safe_ext}"
    while candidate.lower() in used:
        index += 1
        candidate = f"{stem}_{index}.{safe_ext}"

    used.add(candidate.lower())
    return candidate


def versioned_output_path(
    source: Path,
    version_name: str,
    output_dir: Path | None = None,
    used: set[str] | None = None,
    ext: str | None = None,
) -> Path:
    """Pick a path for a translated version of ``source`` that does not exist yet.

    Files already present in the output directory count as used, so a
    previous export is never overwritten. ``ext`` defaults to the source's
    own extension.
    """
    directory = output_dir or source.parent
    taken = set(used) if used is not None else set()
    if directory.is_dir():
        taken.update(p.name.lower() for p in directory.iterdir())
    name = build_unique_export_name(source.stem, version_name, ext or source.suffix, taken)
    if used is not None:
        used.add(name.lower())
    return directory / name
