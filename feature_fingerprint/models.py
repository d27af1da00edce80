from __future__ import annotations

from enum import Enum
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class StepType(str, Enum):
    GIVEN = "Given"
    WHEN = "When"
    THEN = "Then"
    AND = "And"
    BUT = "But"
    WILDCARD = "*"


class Step(BaseModel):
    model_config = ConfigDict(frozen=True)

    fingerprint: str
    raw_content: str  # keyword + description, exactly as matched
    type: StepType
    description: str


class Background(BaseModel):
    model_config = ConfigDict(frozen=True)

    fingerprint: str
    raw_content: str
    raw_steps: str
    steps: Tuple[Step, ...] = Field(default_factory=tuple)


class Scenario(BaseModel):
    model_config = ConfigDict(frozen=True)

    fingerprint: str
    description: str  # not part of the fingerprint
    raw_content: str
    raw_steps: str
    steps: Tuple[Step, ...] = Field(default_factory=tuple)


class Feature(BaseModel):
    model_config = ConfigDict(frozen=True)

    description: str
    path: str
    scenarios: Tuple[Scenario, ...] = Field(default_factory=tuple)
    background: Optional[Background] = None
    fingerprint: str

    def scenario_fingerprints(self) -> Tuple[str, ...]:
        return tuple(s.fingerprint for s in self.scenarios)
