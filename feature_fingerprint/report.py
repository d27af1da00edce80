from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Dict, List, Sequence

from pydantic import BaseModel, Field, ValidationError

from .errors import ReportFormatError
from .models import Feature


def features_to_json(features: Sequence[Feature]) -> str:
    return json.dumps([f.model_dump(mode="json") for f in features], indent=2)


def write_report(features: Sequence[Feature], destination: Path) -> Path:
    destination = Path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_text(features_to_json(features) + "\n", encoding="utf-8")
    return destination


def load_report(path: Path) -> List[Feature]:
    """Read a report written by ``write_report`` back into Feature records."""
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ReportFormatError(str(path), f"not JSON ({e.msg} at line {e.lineno})") from e
    if not isinstance(data, list):
        raise ReportFormatError(str(path), "expected a JSON array of features")
    try:
        return [Feature.model_validate(item) for item in data]
    except ValidationError as e:
        raise ReportFormatError(str(path), f"{e.error_count()} validation error(s)") from e


class ChangeStatus(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    CHANGED = "changed"
    UNCHANGED = "unchanged"


class FeatureChange(BaseModel):
    path: str
    status: ChangeStatus
    old_fingerprint: str | None = None
    new_fingerprint: str | None = None
    added_scenarios: List[str] = Field(default_factory=list)  # scenario descriptions
    removed_scenarios: List[str] = Field(default_factory=list)
    background_changed: bool = False


class ReportDiff(BaseModel):
    changes: List[FeatureChange] = Field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return any(c.status != ChangeStatus.UNCHANGED for c in self.changes)

    def by_status(self, status: ChangeStatus) -> List[FeatureChange]:
        return [c for c in self.changes if c.status == status]


def _scenario_delta(old: Feature, new: Feature) -> FeatureChange:
    old_fps = set(old.scenario_fingerprints())
    new_fps = set(new.scenario_fingerprints())
    old_bg = old.background.fingerprint if old.background else None
    new_bg = new.background.fingerprint if new.background else None
    return FeatureChange(
        path=new.path,
        status=ChangeStatus.CHANGED,
        old_fingerprint=old.fingerprint,
        new_fingerprint=new.fingerprint,
        added_scenarios=[s.description for s in new.scenarios if s.fingerprint not in old_fps],
        removed_scenarios=[s.description for s in old.scenarios if s.fingerprint not in new_fps],
        background_changed=old_bg != new_bg,
    )


def compare_reports(old: Sequence[Feature], new: Sequence[Feature]) -> ReportDiff:
    """Match features by path and classify each by fingerprint.

    Output follows the new report's order, with removed features last.
    """
    old_by_path: Dict[str, Feature] = {f.path: f for f in old}
    new_paths = {f.path for f in new}
    changes: List[FeatureChange] = []

    for feat in new:
        before = old_by_path.get(feat.path)
        if before is None:
            changes.append(
                FeatureChange(path=feat.path, status=ChangeStatus.ADDED, new_fingerprint=feat.fingerprint)
            )
        elif before.fingerprint == feat.fingerprint:
            changes.append(
                FeatureChange(
                    path=feat.path,
                    status=ChangeStatus.UNCHANGED,
                    old_fingerprint=before.fingerprint,
                    new_fingerprint=feat.fingerprint,
                )
            )
        else:
            changes.append(_scenario_delta(before, feat))

    for feat in old:
        if feat.path not in new_paths:
            changes.append(
                FeatureChange(path=feat.path, status=ChangeStatus.REMOVED, old_fingerprint=feat.fingerprint)
            )

    return ReportDiff(changes=changes)
