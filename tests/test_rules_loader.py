import pytest

from rules.rules_loader import (
    REQUIRED_CHECKS,
    RulesError,
    load_policy_floor,
    load_recommended_headers,
    load_risk_rubric,
)


def test_bundled_rubric_has_every_check():
    rubric = load_risk_rubric()
    assert REQUIRED_CHECKS <= set(rubric.checks)
    assert rubric.start_score == 100
    assert rubric.required_directives == ("default-src", "object-src", "frame-ancestors", "base-uri")
    assert rubric.checks["source_unsafe_inline"].weight == 14


def test_rubric_check_formats_directive():
    issue = load_risk_rubric().checks["source_wildcard"].issue("img-src")
    assert issue.id == "img-src-wildcard"
    assert issue.message == "img-src has *"
    assert issue.weight == 12


def test_policy_floor_order():
    floor = load_policy_floor()
    assert [(f.directive, f.sources) for f in floor] == [
        ("default-src", ("'self'",)),
        ("object-src", ("'none'",)),
        ("base-uri", ("'self'",)),
        ("frame-ancestors", ("'none'",)),
    ]


def test_recommended_headers_join_lists():
    headers = load_recommended_headers()
    assert headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert headers["Permissions-Policy"].startswith("accelerometer=(), ambient-light-sensor=()")


def test_rubric_missing_checks_rejected(tmp_path):
    path = tmp_path / "rubric.yaml"
    path.write_text("checks:\n  no_hashes: {id: no-hashes, message: x, weight: 5}\n")
    with pytest.raises(RulesError):
        load_risk_rubric(str(path))


def test_missing_file_rejected(tmp_path):
    with pytest.raises(RulesError):
        load_policy_floor(str(tmp_path / "nope.yaml"))


def test_cached_tables_cannot_be_mutated_by_callers():
    headers = load_recommended_headers()
    headers["Referrer-Policy"] = "unsafe-url"
    headers["X-Injected"] = "1"
    fresh = load_recommended_headers()
    assert fresh["Referrer-Policy"] == "strict-origin-when-cross-origin"
    assert "X-Injected" not in fresh

    assert isinstance(load_policy_floor(), tuple)
    rubric = load_risk_rubric()
    with pytest.raises(TypeError):
        rubric.checks["no_hashes"] = None
    with pytest.raises(AttributeError):
        rubric.required_directives.append("script-src")
