from dataclasses import dataclass, field
from typing import Mapping, Tuple

from models.risk import RiskIssue


@dataclass(frozen=True)
class RubricCheck:
    """One weighted rubric check. id and message may contain {directive}."""
    id: str
    message: str
    weight: int

    def issue(self, directive: str = "") -> RiskIssue:
        return RiskIssue(
            id=self.id.format(directive=directive),
            message=self.message.format(directive=directive),
            weight=self.weight,
        )


@dataclass(frozen=True)
class RiskRubric:
    """Static scoring table for the risk assessor. Loaded once and shared, so read-only."""
    checks: Mapping[str, RubricCheck]
    required_directives: Tuple[str, ...] = ()
    source_directives: Tuple[str, ...] = ()
    start_score: int = 100
    low_threshold: int = 80 # score >= low_threshold -> low
    medium_threshold: int = 55 # score >= medium_threshold -> medium
    version: int = 1

    def classify(self, score: int) -> str:
        if score >= self.low_threshold:
            return "low"
        if score >= self.medium_threshold:
            return "medium"
        return "high"


@dataclass(frozen=True)
class FloorDirective:
    """A directive every synthesized policy starts with."""
    directive: str
    sources: Tuple[str, ...] = field(default_factory=tuple)
