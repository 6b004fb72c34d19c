"""Clause-level comparison of serialized CSP policies."""
from typing import List

from models.policy import PolicyDiff
from models.tokens import OrderedTokenSet


def split_clauses(policy: str) -> List[str]:
    """Split a policy on ';' into trimmed, non-empty directive clauses."""
    clauses = OrderedTokenSet(part.strip() for part in (policy or "").split(";"))
    return [clause for clause in clauses if clause]


def diff_policies(policy_a: str, policy_b: str) -> PolicyDiff:
    """
    Compare two policies clause by clause.

    Each directive clause is an opaque set element, so a single changed
    token shows up as one removed and one added clause.

    Returns:
        PolicyDiff with clauses only in policy_b as added and clauses only
        in policy_a as removed, each in its policy's order
    """
    if policy_a == policy_b:
        return PolicyDiff()

    clauses_a = split_clauses(policy_a)
    clauses_b = split_clauses(policy_b)
    set_a, set_b = set(clauses_a), set(clauses_b)
    return PolicyDiff(
        added=[c for c in clauses_b if c not in set_a],
        removed=[c for c in clauses_a if c not in set_b],
    )
