import pytest

from bank_errors import CsrfMismatch, CsrfMissing, CsrfRejected
from csrf_guard import DoubleSubmitGuard, NoCsrfGuard, SameSiteGuard, make_guard


def test_double_submit_issues_random_tokens():
    guard = DoubleSubmitGuard()
    first, second = guard.issue(None), guard.issue(None)
    assert len(first) == 64
    assert int(first, 16) >= 0
    assert first != second


def test_double_submit_admits_equal_values():
    guard = DoubleSubmitGuard()
    token = guard.issue(None)
    assert guard.verify(token, token) is None


@pytest.mark.parametrize("cookie,submitted", [
    (None, None),
    ("abc", None),
    (None, "abc"),
    ("", "abc"),
    ("abc", ""),
])
def test_double_submit_missing(cookie, submitted):
    with pytest.raises(CsrfMissing):
        DoubleSubmitGuard().verify(cookie, submitted)


@pytest.mark.parametrize("cookie,submitted", [
    ("abc", "abd"),
    ("abc", "abc "),
    ("abc", "ABC"),
    ("abc", "abç"),
])
def test_double_submit_mismatch(cookie, submitted):
    with pytest.raises(CsrfMismatch):
        DoubleSubmitGuard().verify(cookie, submitted)


def test_rejections_share_a_base():
    assert issubclass(CsrfMissing, CsrfRejected)
    assert issubclass(CsrfMismatch, CsrfRejected)


def test_samesite_is_browser_enforced():
    guard = SameSiteGuard()
    assert guard.session_samesite == "Lax"
    assert guard.issue(None) is None
    assert guard.verify(None, None) is None
    assert not guard.uses_token


def test_samesite_strict():
    assert SameSiteGuard(policy="strict").session_samesite == "Strict"


def test_samesite_rejects_none_policy():
    with pytest.raises(ValueError):
        SameSiteGuard(policy="None")


def test_vulnerable_guard_admits_everything():
    guard = NoCsrfGuard()
    assert guard.session_samesite is None
    assert guard.issue(None) is None
    assert guard.verify("a", "b") is None


@pytest.mark.parametrize("strategy,cls", [
    ("none", NoCsrfGuard),
    ("samesite", SameSiteGuard),
    ("double-submit", DoubleSubmitGuard),
])
def test_make_guard(strategy, cls):
    guard = make_guard({"CSRF_STRATEGY": strategy, "CSRF_COOKIE_NAME": "xsrf"})
    assert type(guard) is cls
    assert guard.cookie_name == "xsrf"


def test_make_guard_unknown_strategy():
    with pytest.raises(ValueError):
        make_guard({"CSRF_STRATEGY": "magic"})
