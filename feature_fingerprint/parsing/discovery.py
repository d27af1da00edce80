from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from pathspec import PathSpec


DEFAULT_FEATURE_GLOB = "**/*.feature"


def _build_ignore_spec(ignore_globs: List[str]) -> PathSpec:
    return PathSpec.from_lines("gitwildmatch", ignore_globs)


def discover_feature_files(
    root: Path,
    glob: str = DEFAULT_FEATURE_GLOB,
    ignore_globs: Optional[List[str]] = None,
) -> List[Path]:
    """Recursively find feature files under ``root``, sorted by path."""
    ignore_spec = _build_ignore_spec(ignore_globs or [])
    files: List[Path] = []

    for path in root.glob(glob):
        rel = path.relative_to(root)
        if ignore_spec.match_file(rel.as_posix()):
            continue
        if path.is_dir():
            continue
        files.append(path)

    return sorted(files)
