from access_audit.models import AuditReport, ResultItem
from access_audit.scoring import AccessibilityScore, calculate_accessibility_score, format_score


def _items(count, prefix="rule"):
    return tuple(ResultItem(id=f"{prefix}-{index}", impact="N/A", description="") for index in range(count))


def test_all_applicable_tests_passing_scores_100():
    assert calculate_accessibility_score(tests_run=50, passes=40, inapplicable=10) == 100.0


def test_score_without_inapplicable_tests():
    assert calculate_accessibility_score(tests_run=50, passes=20, inapplicable=0) == 40.0


def test_score_is_rounded_to_two_decimals():
    assert calculate_accessibility_score(tests_run=3, passes=1, inapplicable=0) == 33.33
    assert format_score(33.333333) == "33.33"


def test_zero_applicable_tests_scores_zero_not_nan():
    assert calculate_accessibility_score(tests_run=10, passes=0, inapplicable=10) == 0.0
    assert calculate_accessibility_score(tests_run=0, passes=0, inapplicable=0) == 0.0


def test_score_stays_within_bounds():
    for tests_run in range(1, 12):
        for inapplicable in range(tests_run):
            for passes in range(tests_run - inapplicable + 1):
                score = calculate_accessibility_score(tests_run, passes, inapplicable)
                assert 0.0 <= score <= 100.0


def test_score_from_report_counts_categories():
    report = AuditReport(
        passes=_items(20, "pass"),
        violations=_items(30, "violation"),
        tests_run=_items(50),
    )
    score = AccessibilityScore.from_report(report)
    assert score.value == 40.0
    assert score.display == "40.00%"
    assert score.to_dict()["tests_run"] == 50
