from __future__ import annotations

import logging
from re import Match
from typing import List, Optional

from ..fingerprint import compose_fingerprint, digest, fingerprint_of
from ..models import Background, Scenario, Step, StepType
from .grammar import DEFAULT_GRAMMAR, Grammar


log = logging.getLogger(__name__)


def extract_steps(raw_steps: str, grammar: Grammar = DEFAULT_GRAMMAR) -> List[Step]:
    """Build a Step for every step line in ``raw_steps``, in source order.

    Lines that do not look like a step are skipped without error.
    """
    steps: List[Step] = []
    for m in grammar.step.finditer(raw_steps):
        steps.append(
            Step(
                fingerprint=digest(m.group(0)),
                raw_content=m.group(0),
                type=StepType(m.group("type")),
                description=m.group("description"),
            )
        )
    return steps


def build_scenario(match: Match[str], grammar: Grammar = DEFAULT_GRAMMAR) -> Scenario:
    # The description is left out of the fingerprint so renames are not changes.
    steps = extract_steps(match.group("steps"), grammar)
    return Scenario(
        fingerprint=compose_fingerprint(map(fingerprint_of, steps)),
        description=match.group("description"),
        raw_content=match.group(0),
        raw_steps=match.group("steps"),
        steps=tuple(steps),
    )


def build_scenarios(content: str, grammar: Grammar = DEFAULT_GRAMMAR) -> List[Scenario]:
    return [build_scenario(m, grammar) for m in grammar.scenario.finditer(content)]


def build_background(match: Optional[Match[str]], grammar: Grammar = DEFAULT_GRAMMAR) -> Optional[Background]:
    if match is None:
        return None
    steps = extract_steps(match.group("steps"), grammar)
    return Background(
        fingerprint=compose_fingerprint(map(fingerprint_of, steps)),
        raw_content=match.group(0),
        raw_steps=match.group("steps"),
        steps=tuple(steps),
    )


def find_background(content: str, grammar: Grammar = DEFAULT_GRAMMAR, source: str = "<text>") -> Optional[Match[str]]:
    """Return the first background block in ``content``, if any.

    Only the first block is used. Further blocks are reported, not merged.
    """
    matches = grammar.background.finditer(content)
    first = next(matches, None)
    if first is not None and next(matches, None) is not None:
        log.warning("%s contains more than one Background:, using the first", source)
    return first
