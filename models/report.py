from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.crawl import CollectOutcome
from models.policy import DirectiveSummary, PolicyDiff, PolicyResult
from models.risk import RiskAssessment

RUNTIME_DISABLED = "disabled"
RUNTIME_OK = "ok"
RUNTIME_UNAVAILABLE = "unavailable"


@dataclass
class AnalysisReport:
    """Everything one analysis produces, ready for rendering."""
    input: str
    final_url: str
    status: int
    existing: Optional[str]
    baseline: PolicyResult
    strict: PolicyResult
    active_mode: str # "baseline" or "strict"
    runtime: bool
    runtime_status: str
    depth: int
    pages: List[str]
    diff_modes: PolicyDiff # baseline -> strict
    headers: Dict[str, str] # recommended companion headers
    risk: Dict[str, RiskAssessment] # active, baseline, strict
    summaries: Dict[str, Dict[str, DirectiveSummary]] # baseline, strict
    crawl_outcomes: List[CollectOutcome] = field(default_factory=list)

    @property
    def active(self) -> PolicyResult:
        return self.strict if self.active_mode == "strict" else self.baseline

    def to_dict(self) -> Dict[str, object]:
        return {
            "input": self.input,
            "final_url": self.final_url,
            "status": self.status,
            "existing": self.existing,
            "baseline": self.baseline.to_dict(),
            "strict": self.strict.to_dict(),
            "active_mode": self.active_mode,
            "policy": self.active.policy,
            "notes": list(self.active.notes),
            "runtime": self.runtime,
            "runtime_status": self.runtime_status,
            "crawl": {
                "depth": self.depth,
                "pages": list(self.pages),
                "count": len(self.pages),
                "outcomes": [o.to_dict() for o in self.crawl_outcomes],
            },
            "diff_modes": self.diff_modes.to_dict(),
            "headers": dict(self.headers),
            "risk": {mode: assessment.to_dict() for mode, assessment in self.risk.items()},
            "summaries": {
                mode: {name: s.to_dict() for name, s in summary.items()}
                for mode, summary in self.summaries.items()
            },
        }
