from core.policy_diff import diff_policies, split_clauses

BASELINE = "default-src 'self'; script-src 'self' https://cdn.example.com; upgrade-insecure-requests"
STRICT = "default-src 'self'; script-src 'self'; upgrade-insecure-requests"


def test_identical_policies_have_empty_diff():
    diff = diff_policies(BASELINE, BASELINE)
    assert diff.added == [] and diff.removed == []
    assert diff.is_empty()


def test_changed_clause_reported_as_removed_and_added():
    diff = diff_policies(BASELINE, STRICT)
    assert diff.added == ["script-src 'self'"]
    assert diff.removed == ["script-src 'self' https://cdn.example.com"]


def test_diff_is_antisymmetric():
    forward = diff_policies(BASELINE, STRICT)
    backward = diff_policies(STRICT, BASELINE)
    assert forward.added == backward.removed
    assert forward.removed == backward.added


def test_whitespace_around_separators_is_ignored():
    diff = diff_policies("default-src 'self';script-src 'self' ;", "default-src 'self'; script-src 'self'")
    assert diff.is_empty()


def test_split_clauses_drops_empty_and_duplicate_clauses():
    assert split_clauses("a; ; b;a ;") == ["a", "b"]
    assert split_clauses("") == []
