from dataclasses import dataclass, field
from typing import Dict, List


@dataclass(frozen=True)
class RiskIssue:
    """A single rubric deduction."""
    id: str
    message: str
    weight: int

    def to_dict(self) -> Dict[str, object]:
        return {"id": self.id, "message": self.message, "weight": self.weight}


@dataclass(frozen=True)
class RiskAssessment:
    score: int # 0..100
    level: str # low | medium | high
    issues: List[RiskIssue] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "score": self.score,
            "level": self.level,
            "issues": [issue.to_dict() for issue in self.issues],
        }
