import asyncio

import pytest

from enum_tool.classifier import (
    ACCEPT_THRESHOLD,
    Signals,
    classify,
    is_self_redirect,
    score_probe,
    status_is_ok,
    title_is_ok,
)
from enum_tool.state import signature_of

from conftest import NOT_FOUND_PAGE, FakeFetcher

BASE = "http://h.com/site"
LISTING = "<html><head><title>Index of /site/admin</title></head><body><h1>Index of /site/admin</h1>" \
          '<a href="../">Parent Directory</a></body></html>'


def run_classify(fetcher, candidate, baseline):
    return asyncio.run(classify(fetcher, BASE, candidate, baseline))


def test_probe_identical_to_baseline_is_rejected():
    # soft 404 served with 200: only statusOK and notRedirect could fire
    soft = "<html><body>Oops</body></html>"
    fetcher = FakeFetcher(pages={f"{BASE}/admin/": soft}, statuses={f"{BASE}/admin/": 500})
    result = run_classify(fetcher, "admin/", signature_of(soft))
    assert result is not None
    assert not result.signals.not404
    assert result.score == 1
    assert not result.accepted


def test_listing_page_is_accepted_with_all_tags():
    fetcher = FakeFetcher(pages={f"{BASE}/admin/": LISTING})
    result = run_classify(fetcher, "admin/", signature_of(NOT_FOUND_PAGE))
    assert result.accepted
    assert result.score == 5
    assert result.signals.tags() == ["not404", "statusOK", "dirPattern", "titleOK", "notRedirect"]
    assert result.url == f"{BASE}/admin/"
    assert fetcher.status_calls == [f"{BASE}/admin/"]


def test_unreachable_candidate_is_absent_not_rejected():
    fetcher = FakeFetcher(not_found="")
    assert run_classify(fetcher, "secret/", b"") is None
    assert fetcher.status_calls == []


def test_real_404_page_scores_below_threshold():
    fetcher = FakeFetcher()
    result = run_classify(fetcher, "hidden/", signature_of(NOT_FOUND_PAGE))
    assert result.signals == Signals(not_redirect=True)
    assert result.score < ACCEPT_THRESHOLD


@pytest.mark.parametrize(
    "text, expected",
    [("200", True), ("301", True), ("302", True), ("404", False), ("", False),
     # substring match, not numeric comparison
     ("1200", True), ("3020", True)],
)
def test_status_substring_match(text, expected):
    assert status_is_ok(text) is expected


@pytest.mark.parametrize(
    "body, expected",
    [
        ("<title>Welcome</title>", True),
        ("<TITLE>Admin panel</TITLE>", True),
        ("<title></title>", False),
        ("<title>404 - missing</title>", False),
        ("<title>Page Not Found</title>", False),
        ("no title at all", False),
        ("<title>first</title><title>404</title>", True),
    ],
)
def test_title_check(body, expected):
    assert title_is_ok(body) is expected


def test_meta_refresh_back_to_base_is_a_redirect_loop():
    body = f'<html><head><meta http-equiv="Refresh" content="0; url={BASE}"></head></html>'
    assert is_self_redirect(body, BASE)


def test_meta_refresh_elsewhere_is_not_a_loop():
    body = '<meta http-equiv="refresh" content="0; url=http://elsewhere/">'
    assert not is_self_redirect(body, BASE)
    assert not is_self_redirect(f"<p>{BASE}</p>", BASE)


def test_score_probe_counts_signals():
    signals = score_probe("<h1>Directory listing for /x</h1>", "302", BASE, b"")
    assert signals.not404 and signals.status_ok and signals.looks_like_dir
    assert not signals.title_ok
    assert signals.score == 4


def test_directory_patterns_are_case_sensitive():
    signals = score_probe("index of /x", "404", BASE, b"index of /x")
    assert not signals.looks_like_dir


def test_baseline_compares_bytes_not_characters():
    # soft 404 that echoes the requested URL after 600 bytes of multibyte text
    prefix = "é" * 300
    admin = f"{BASE}/admin/"
    fetcher = FakeFetcher(pages={admin: prefix + admin}, statuses={admin: 404})
    baseline = signature_of(prefix + f"{BASE}/__enum_nonce_7/")
    assert len(baseline) == 512

    result = run_classify(fetcher, "admin/", baseline)
    assert not result.signals.not404
    assert not result.accepted
