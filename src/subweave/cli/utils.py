"""Shared CLI utilities."""

from __future__ import annotations

from pathlib import Path


def expand_inputs(inputs: list[str]) -> list[str]:
    """Expand glob patterns and list files into individual subtitle paths."""
    expanded = []
    for inp in inputs:
        path = Path(inp)

        # .txt file: read as path list (one per line)
        if path.suffix == ".txt" and path.is_file():
            for line in path.read_text(encoding="utf-8").splitlines():
                line = line.strip()
                if line and not line.startswith("#"):
                    expanded.append(line)
            continue

        # Try as glob pattern if it contains wildcards
        if any(c in inp for c in "*?["):
            matches = sorted(Path(".").glob(inp))
            if matches:
                expanded.extend(str(m) for m in matches)
                continue

        # Regular file path
        expanded.append(inp)

    return expanded


def read_subtitle(path: Path) -> str:
    """Read a subtitle file without translating line endings."""
    with open(path, encoding="utf-8", newline="") as f:
        return f.read()


def write_subtitle(path: Path, content: str) -> Path:
    """Write subtitle text exactly as given, line endings included."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        f.write(content)
    return path
