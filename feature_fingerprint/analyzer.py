from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .config import AppConfig
from .errors import FeatureEncodingError, MissingFeatureHeader
from .fingerprint import compose_fingerprint, fingerprint_of
from .models import Feature
from .parsing.builder import build_background, build_scenarios, find_background
from .parsing.discovery import discover_feature_files
from .parsing.grammar import DEFAULT_GRAMMAR, Grammar


log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

# Upstream callers may pass "features/login.feature:12".
_LINE_SUFFIX = re.compile(r":\d+$")


def strip_line_suffix(path: PathLike) -> str:
    return _LINE_SUFFIX.sub("", os.fspath(path))


def relative_path(file: str, project_root: Optional[PathLike] = None) -> str:
    """``file`` relative to ``project_root`` in POSIX form; kept as given when outside it."""
    # abspath is lexical; symlinked feature files keep their in-tree path
    root = os.path.abspath(project_root if project_root is not None else os.curdir)
    try:
        return Path(os.path.abspath(file)).relative_to(root).as_posix()
    except ValueError:
        return Path(file).as_posix()


def read_feature_text(file: str) -> str:
    # no newline translation: raw content must match the file bytes
    try:
        with open(file, "r", encoding="utf-8", newline="") as fh:
            return fh.read()
    except UnicodeDecodeError as e:
        raise FeatureEncodingError(file, e) from e


def parse_feature(
    content: str,
    path: str,
    grammar: Grammar = DEFAULT_GRAMMAR,
    source: Optional[str] = None,
) -> Feature:
    """Parse already-loaded feature text. ``path`` is recorded as-is.

    ``source`` names the file in errors and warnings (defaults to ``path``).
    """
    source = source or path
    header = grammar.feature.search(content)
    if header is None:
        raise MissingFeatureHeader(source)

    scenarios = build_scenarios(content, grammar)
    background = build_background(find_background(content, grammar, source=source), grammar)

    # Fingerprint of fingerprints: scenarios in file order, then the background.
    # Scenario names and whitespace outside steps do not contribute.
    children = [*scenarios, background] if background is not None else list(scenarios)
    return Feature(
        description=header.group("description"),
        path=path,
        scenarios=tuple(scenarios),
        background=background,
        fingerprint=compose_fingerprint(map(fingerprint_of, children)),
    )


def process_feature(
    path: PathLike,
    result: Optional[List[Feature]] = None,
    project_root: Optional[PathLike] = None,
    grammar: Grammar = DEFAULT_GRAMMAR,
) -> Feature:
    """Read one feature file and build its fingerprinted record.

    Raises MissingFeatureHeader when the file has no ``Feature:`` line; I/O
    errors propagate unchanged. When ``result`` is given the feature is
    appended to it before returning.
    """
    file = strip_line_suffix(path)
    log.debug("Processing %s", file)
    content = read_feature_text(file)
    feature = parse_feature(content, relative_path(file, project_root), grammar, source=file)

    if result is not None:
        result.append(feature)
    return feature


def process_features(
    files: Optional[Iterable[PathLike]] = None,
    project_root: Optional[PathLike] = None,
    result: Optional[List[Feature]] = None,
    grammar: Grammar = DEFAULT_GRAMMAR,
    config: Optional[AppConfig] = None,
) -> List[Feature]:
    """Process ``files`` in order, stopping at the first failure.

    Without ``files``, feature files are discovered under the configured
    features directory. Features built before a failure remain in ``result``.
    """
    if files is None or project_root is None:
        config = config or AppConfig()
    if project_root is None:
        project_root = config.project_root
    if files is None:
        files = discover_feature_files(config.features_path, config.feature_glob, config.ignore_globs)

    features: List[Feature] = result if result is not None else []
    for file in files:
        process_feature(file, result=features, project_root=project_root, grammar=grammar)

    log.debug("Processed %d feature files", len(features))
    return features
