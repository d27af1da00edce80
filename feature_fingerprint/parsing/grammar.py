from __future__ import annotations

import re
from dataclasses import dataclass
from re import Pattern


# Skips leading blanks on the same line; never captures trailing whitespace.
# e.g. "Scenario:<tab>wow<space>" captures only "wow"
DESCRIPTION = r"(?:[ \t]*(?=\S))?(?P<description>(?:.*\S)?)"

# Lazily takes 0-n characters until the first of:
# - a blank line (two consecutive line breaks)
# - end of input, optionally after one final line break
# - a following line starting with Scenario / Background / Feature
STEPS = (
    r"(?P<steps>[\s\S]*?"
    r"(?=(?:\r?\n){2}|(?:\r?\n)?\Z|\r?\n[ \t]*(?:Scenario|Background|Feature)\b))"
)

# <type> <description>, e.g. type "Given", description "I am a signed in user"
STEP = r"(?<!\S)(?P<type>(?:Given|When|Then|And|But)\b|\*)" + DESCRIPTION

FEATURE = r"Feature:" + DESCRIPTION
SCENARIO = r"Scenario:" + DESCRIPTION + STEPS
BACKGROUND = r"Background:" + STEPS


@dataclass(frozen=True)
class Grammar:
    """Compiled patterns recognising feature, background, scenario and step text."""

    description: Pattern[str]
    steps: Pattern[str]
    step: Pattern[str]
    feature: Pattern[str]
    scenario: Pattern[str]
    background: Pattern[str]

    @classmethod
    def compile(cls) -> "Grammar":
        def _c(source: str) -> Pattern[str]:
            return re.compile(source, re.MULTILINE)

        return cls(
            description=_c(DESCRIPTION),
            steps=_c(STEPS),
            step=_c(STEP),
            feature=_c(FEATURE),
            scenario=_c(SCENARIO),
            background=_c(BACKGROUND),
        )


DEFAULT_GRAMMAR = Grammar.compile()
