"""Heuristic risk scoring of serialized CSP policies."""
import re
from typing import Dict, List, Optional

from models.risk import RiskAssessment, RiskIssue
from models.rubric import RiskRubric
from rules.rules_loader import load_risk_rubric

HASH_SOURCE_PATTERN = re.compile(r"'sha256-[A-Za-z0-9+/=]+'")
UPGRADE_DIRECTIVE = "upgrade-insecure-requests"


def parse_policy(policy: str) -> Dict[str, List[str]]:
    """Map directive name to its tokens. A repeated directive keeps its last occurrence."""
    directives: Dict[str, List[str]] = {}
    for clause in re.split(r";\s*", policy or ""):
        tokens = clause.split()
        if tokens:
            directives[tokens[0]] = tokens[1:]
    return directives


def assess_policy(policy: str, rubric: Optional[RiskRubric] = None) -> RiskAssessment:
    """
    Score a policy against the risk rubric.

    Starts from the rubric's start score and subtracts the weight of each
    triggered check. Issues are reported in evaluation order.
    """
    rubric = rubric or load_risk_rubric()
    checks = rubric.checks
    directives = parse_policy(policy)
    issues: List[RiskIssue] = []

    for name in rubric.required_directives:
        if name not in directives:
            issues.append(checks["missing_directive"].issue(name))

    if "*" in directives.get("default-src", []):
        issues.append(checks["default_wildcard"].issue("default-src"))

    for name in rubric.source_directives:
        tokens = directives.get(name)
        if tokens is None:
            continue
        if "*" in tokens:
            issues.append(checks["source_wildcard"].issue(name))
        if any(t.startswith("http:") for t in tokens):
            issues.append(checks["source_http"].issue(name))
        if "'unsafe-inline'" in tokens:
            issues.append(checks["source_unsafe_inline"].issue(name))
        if "'unsafe-eval'" in tokens:
            issues.append(checks["source_unsafe_eval"].issue(name))

    if "object-src" in directives and "'none'" not in directives["object-src"]:
        issues.append(checks["object_not_none"].issue("object-src"))

    if "*" in directives.get("frame-ancestors", []):
        issues.append(checks["frame_wildcard"].issue("frame-ancestors"))

    clauses = [c.strip() for c in (policy or "").split(";")]
    if not any(c.startswith(UPGRADE_DIRECTIVE) for c in clauses):
        issues.append(checks["missing_upgrade"].issue())

    script_src = directives.get("script-src")
    if script_src and "'unsafe-inline'" not in script_src and not HASH_SOURCE_PATTERN.search(policy):
        issues.append(checks["no_hashes"].issue("script-src"))

    score = max(0, rubric.start_score - sum(issue.weight for issue in issues))
    return RiskAssessment(score=score, level=rubric.classify(score), issues=issues)
