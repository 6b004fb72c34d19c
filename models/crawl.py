from dataclasses import dataclass, field
from typing import Dict, List, Optional

from models.manifest import ResourceManifest

COLLECTED = "collected"
SKIPPED = "skipped"


@dataclass(frozen=True)
class CollectOutcome:
    """Per-page result of a crawl step: either collected or skipped with a reason."""
    url: str
    status: str # COLLECTED or SKIPPED
    final_url: Optional[str] = None
    reason: Optional[str] = None

    @property
    def collected(self) -> bool:
        return self.status == COLLECTED

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {
            "url": self.url,
            "status": self.status,
            "final_url": self.final_url,
            "reason": self.reason,
        }


@dataclass
class CrawlResult:
    pages: List[str] # every visited URL, reachable or not
    resources: ResourceManifest
    outcomes: List[CollectOutcome] = field(default_factory=list)

    @property
    def skipped(self) -> List[CollectOutcome]:
        return [o for o in self.outcomes if not o.collected]
