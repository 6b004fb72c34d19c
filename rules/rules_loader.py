"""Loaders for the static YAML tables that drive policy synthesis and scoring."""
import functools
import logging
import os
from types import MappingProxyType
from typing import Dict, Optional, Tuple

import yaml

from models.rubric import FloorDirective, RiskRubric, RubricCheck

logger = logging.getLogger(__name__)

RULES_DIR = os.path.dirname(os.path.abspath(__file__))
RISK_RUBRIC_FILE = "risk_rubric.yaml"
POLICY_FLOOR_FILE = "policy_floor.yaml"
RECOMMENDED_HEADERS_FILE = "recommended_headers.yaml"

# Check keys the risk assessor looks up; a rubric missing any of them is rejected
REQUIRED_CHECKS = {
    "missing_directive",
    "default_wildcard",
    "source_wildcard",
    "source_http",
    "source_unsafe_inline",
    "source_unsafe_eval",
    "object_not_none",
    "frame_wildcard",
    "missing_upgrade",
    "no_hashes",
}


class RulesError(ValueError):
    """Raised when a rules table is missing or malformed."""


def _load_yaml(path: str):
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except FileNotFoundError as e:
        raise RulesError(f"Rules file not found: {path}") from e
    except yaml.YAMLError as e:
        raise RulesError(f"Invalid YAML in {path}: {e}") from e


def _resolve(filename: str, path: Optional[str]) -> str:
    return path or os.path.join(RULES_DIR, filename)


@functools.lru_cache(maxsize=None)
def load_risk_rubric(path: Optional[str] = None) -> RiskRubric:
    """
    Load the risk rubric table.

    Args:
        path: Optional path to a rubric YAML file (default: bundled risk_rubric.yaml)

    Returns:
        RiskRubric with every check the assessor needs

    Raises:
        RulesError: if the file is missing, malformed or lacks required checks
    """
    path = _resolve(RISK_RUBRIC_FILE, path)
    data = _load_yaml(path)
    if not isinstance(data, dict):
        raise RulesError(f"Risk rubric must be a mapping: {path}")

    raw_checks = data.get("checks") or {}
    missing = REQUIRED_CHECKS - set(raw_checks)
    if missing:
        raise RulesError(f"Risk rubric {path} missing checks: {', '.join(sorted(missing))}")

    checks: Dict[str, RubricCheck] = {}
    for key, check in raw_checks.items():
        if not isinstance(check, dict) or not all(k in check for k in ("id", "message", "weight")):
            raise RulesError(f"Invalid rubric check '{key}' in {path}")
        checks[key] = RubricCheck(
            id=str(check["id"]),
            message=str(check["message"]),
            weight=int(check["weight"]),
        )

    levels = data.get("levels") or {}
    rubric = RiskRubric(
        checks=MappingProxyType(checks),
        required_directives=tuple(data.get("required_directives") or ()),
        source_directives=tuple(data.get("source_directives") or ()),
        start_score=int(data.get("start_score", 100)),
        low_threshold=int(levels.get("low", 80)),
        medium_threshold=int(levels.get("medium", 55)),
        version=int(data.get("version", 1)),
    )
    logger.debug(f"Loaded risk rubric v{rubric.version} with {len(checks)} checks from {path}")
    return rubric


@functools.lru_cache(maxsize=None)
def load_policy_floor(path: Optional[str] = None) -> Tuple[FloorDirective, ...]:
    """Load the hardening directives every policy starts with."""
    path = _resolve(POLICY_FLOOR_FILE, path)
    data = _load_yaml(path)
    if not isinstance(data, list):
        raise RulesError(f"Policy floor must be a list: {path}")

    floor = []
    for entry in data:
        if not isinstance(entry, dict) or "directive" not in entry:
            raise RulesError(f"Invalid policy floor entry in {path}: {entry}")
        floor.append(
            FloorDirective(
                directive=str(entry["directive"]),
                sources=tuple(str(s) for s in entry.get("sources") or ()),
            )
        )
    return tuple(floor)


@functools.lru_cache(maxsize=None)
def _load_recommended_headers(path: Optional[str]) -> Tuple[Tuple[str, str], ...]:
    path = _resolve(RECOMMENDED_HEADERS_FILE, path)
    data = _load_yaml(path)
    if not isinstance(data, dict):
        raise RulesError(f"Recommended headers must be a mapping: {path}")

    headers: Dict[str, str] = {}
    for name, value in data.items():
        if isinstance(value, list):
            headers[str(name)] = ", ".join(str(v) for v in value)
        else:
            headers[str(name)] = str(value)
    return tuple(headers.items())


def load_recommended_headers(path: Optional[str] = None) -> Dict[str, str]:
    """Load companion security headers; list values are joined with ', '. Returns a fresh dict per call."""
    return dict(_load_recommended_headers(path))


# Example usage (for testing)
if __name__ == "__main__":
    rubric = load_risk_rubric()
    print(f"Risk rubric v{rubric.version}: {len(rubric.checks)} checks")
    for key, check in rubric.checks.items():
        print(f"  - {key}: id={check.id}, weight={check.weight}")
    for floor_entry in load_policy_floor():
        print(f"  floor: {floor_entry.directive} {' '.join(floor_entry.sources)}")
