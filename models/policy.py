from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from models.tokens import OrderedTokenSet


class DirectiveSet:
    """CSP directives keyed by name, each holding a de-duplicated token list.

    Directive order is the order directives were first set.
    """

    def __init__(self):
        self._directives: Dict[str, OrderedTokenSet] = {}

    def set(self, name: str, tokens: Iterable[str] = ()) -> None:
        self._directives[name] = OrderedTokenSet(tokens)

    def get(self, name: str) -> Optional[OrderedTokenSet]:
        return self._directives.get(name)

    def names(self) -> List[str]:
        return list(self._directives)

    def items(self) -> Iterator[Tuple[str, OrderedTokenSet]]:
        return iter(self._directives.items())

    def as_dict(self) -> Dict[str, List[str]]:
        return {name: tokens.as_list() for name, tokens in self._directives.items()}

    def __contains__(self, name: object) -> bool:
        return name in self._directives

    def __len__(self) -> int:
        return len(self._directives)


@dataclass(frozen=True)
class PolicyDiff:
    """Directive clauses added to and removed from a policy."""
    added: List[str] = field(default_factory=list)
    removed: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.added and not self.removed

    def to_dict(self) -> Dict[str, List[str]]:
        return {"added": list(self.added), "removed": list(self.removed)}


@dataclass
class PolicyResult:
    policy: str
    directives: DirectiveSet
    diff: Optional[PolicyDiff] = None # only when an existing policy was supplied
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, object]:
        return {
            "policy": self.policy,
            "directives": self.directives.as_dict(),
            "diff_existing": self.diff.to_dict() if self.diff else None,
            "notes": list(self.notes),
        }


@dataclass(frozen=True)
class DirectiveSummary:
    """Token class counts for a single directive."""
    sources: int
    hashes: int
    origins: int
    wildcards: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "sources": self.sources,
            "hashes": self.hashes,
            "origins": self.origins,
            "wildcards": self.wildcards,
        }
