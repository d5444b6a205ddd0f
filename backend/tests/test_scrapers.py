import json
import os
import time

import pytest
import requests

from app.scrapers.base import Candidate, SourceResult, best_score_match, first_result, first_substring_match
from app.scrapers.fetcher import ProxyBlockedError, ProxyFetcher
from app.scrapers.proxies import FALLBACK_PROXIES, ProxyPool, proxy_url
from app.scrapers.sites import (
    EneyidaSource, KinogoSource, LavakinoSource, UafixSource, UakinoSource, UaserialsSource, dle_search_url
)


class FakeResponse:
    def __init__(self, text="", status_code=200):
        self.text = text
        self.status_code = status_code

    @property
    def ok(self):
        return 200 <= self.status_code < 400


class FakeFetcher:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def fetch(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        if self.error:
            raise self.error
        return self.response


class FakeSession:
    """Plays back queued results for session.request / session.get"""

    def __init__(self, outcomes=None, get_outcomes=None):
        self.outcomes = list(outcomes or [])
        self.get_outcomes = dict(get_outcomes or {})
        self.requests = []

    def request(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get(self, url, **kwargs):
        outcome = self.get_outcomes.get(url, FakeResponse(status_code=500))
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakePool:
    def __init__(self, working=None, randoms=None):
        self.working = working
        self.randoms = list(randoms or [])

    def working_proxy(self):
        return self.working

    def random_proxy(self, protocol="http"):
        return self.randoms.pop(0) if self.randoms else None


# Matching

def test_best_score_prefers_exact_title_and_year():
    candidates = [
        Candidate(url="/a", title="Дюна: Частина друга (2024)"),
        Candidate(url="/b", title="Дюна (1984)"),
        Candidate(url="/c", title="Дюна (2021)"),
    ]
    result = best_score_match(candidates, "Дюна", "2021")
    assert result == SourceResult(found=True, url="/c", title="Дюна (2021)")


def test_best_score_keeps_first_of_equal_scores():
    candidates = [Candidate(url="/a", title="Дюна (1984)"), Candidate(url="/b", title="Дюна (2021)")]
    assert best_score_match(candidates, "Дюна", None).url == "/a"


def test_best_score_without_any_overlap():
    assert not best_score_match([Candidate(url="/a", title="Інше")], "Дюна", None).found


def test_first_substring_respects_year():
    candidates = [
        Candidate(url="/a", title="Дюна (1984)"),
        Candidate(url="/b", title="Дюна (2021)"),
    ]
    assert first_substring_match(candidates, "дюна", "2021").url == "/b"
    assert first_substring_match(candidates, "дюна", None).url == "/a"
    assert not first_substring_match(candidates, "матриця", None).found


def test_first_result():
    assert first_result([Candidate(url="/x", title="Any")], "q", None).found
    assert not first_result([], "q", None).found


def test_source_result_drops_empty_fields():
    assert SourceResult(found=False).to_dict() == {"found": False}
    assert SourceResult(found=False, error="boom").to_dict() == {"found": False, "error": "boom"}


# Sites

def test_dle_search_url():
    url = dle_search_url("https://eneyida.tv/", "Дюна Два", search_start=0, full_search=0)
    assert url.startswith("https://eneyida.tv/index.php?do=search&subaction=search&search_start=0&full_search=0&story=")
    assert url.endswith("%D0%B4%D1%8E%D0%BD%D0%B0%20%D0%B4%D0%B2%D0%B0")


def test_uakino_posts_lowercase_story_through_proxy():
    html = """
    <div class="movie-item"><a href="https://uakino.me/film/1"></a><span class="movie-title">Дюна (2021)</span></div>
    """
    fetcher = FakeFetcher(FakeResponse(html))
    result = UakinoSource(fetcher).search("Дюна", "2021")

    assert result == SourceResult(found=True, url="https://uakino.me/film/1", title="Дюна (2021)")
    method, url, kwargs = fetcher.calls[0]
    assert method == "POST"
    assert url == "https://uakino.me/index.php?do=search"
    assert kwargs["data"]["story"] == "дюна"
    assert kwargs["use_proxy"] is True
    assert kwargs["headers"]["Referer"] == "https://uakino.me/"


def test_eneyida_scores_candidates():
    html = """
    <div id="dle-content">
      <div class="related_item"><a href="/one"></a><div class="short_title">Дюна: Пророцтво (2024)</div></div>
      <div class="related_item"><a href="/two"></a><div class="short_title">Дюна (2021)</div></div>
    </div>
    """
    result = EneyidaSource(FakeFetcher(FakeResponse(html))).search("Дюна", "2021")
    assert result.url == "/two"


def test_lavakino_takes_first_result():
    html = '<div id="dle-content"><div class="short"><a class="short-title" href="/lava">Щось</a></div></div>'
    result = LavakinoSource(FakeFetcher(FakeResponse(html))).search("Дюна")
    assert result == SourceResult(found=True, url="/lava", title="Щось")


def test_uaserials_sends_no_referer_and_no_proxy():
    html = '<div id="dle-content"><div class="short-item"><a href="/s"></a><div class="th-title">Дюна</div></div></div>'
    fetcher = FakeFetcher(FakeResponse(html))
    assert UaserialsSource(fetcher).search("Дюна").found
    _, _, kwargs = fetcher.calls[0]
    assert "Referer" not in kwargs["headers"]
    assert kwargs["use_proxy"] is False


def test_uafix_uses_its_own_timeout():
    html = '<div id="dle-content"><a href="/fix"><div class="sres-text"><h2>Дюна</h2></div></a></div>'
    fetcher = FakeFetcher(FakeResponse(html))
    assert UafixSource(fetcher, timeout=15).search("Дюна").url == "/fix"
    assert fetcher.calls[0][2]["timeout"] == 12


def test_kinogo_search_path():
    html = '<div id="dle-content"><div class="shortStory"><a href="/k">Дюна</a></div></div>'
    fetcher = FakeFetcher(FakeResponse(html))
    assert KinogoSource(fetcher).search("Дюна").found
    assert fetcher.calls[0][1] == "https://ua.kinogo.online/search/%D0%B4%D1%8E%D0%BD%D0%B0"


def test_no_candidates_is_not_found():
    result = UaserialsSource(FakeFetcher(FakeResponse("<html></html>"))).search("Дюна")
    assert result == SourceResult(found=False)


def test_failed_request_is_reported_not_raised():
    result = UakinoSource(FakeFetcher(error=requests.ConnectionError("refused"))).search("Дюна")
    assert result.found is False
    assert "refused" in result.error


def test_non_ok_status_is_reported():
    result = UafixSource(FakeFetcher(FakeResponse(status_code=500))).search("Дюна")
    assert result.found is False
    assert "500" in result.error


# Proxy fetcher

def test_direct_request_when_proxy_not_wanted():
    session = FakeSession([FakeResponse("ok")])
    fetcher = ProxyFetcher(FakePool(working="http://1.1.1.1:80"), session)
    assert fetcher.fetch("GET", "https://site", use_proxy=False).text == "ok"
    assert "proxies" not in session.requests[0][2]


def test_first_attempt_uses_probed_proxy():
    session = FakeSession([FakeResponse("ok")])
    fetcher = ProxyFetcher(FakePool(working="http://1.1.1.1:80"), session)
    fetcher.fetch("GET", "https://site")
    assert session.requests[0][2]["proxies"] == {"http": "http://1.1.1.1:80", "https": "http://1.1.1.1:80"}


def test_no_proxy_available_goes_direct():
    session = FakeSession([FakeResponse("direct")])
    fetcher = ProxyFetcher(FakePool(), session)
    assert fetcher.fetch("GET", "https://site").text == "direct"
    assert "proxies" not in session.requests[0][2]


def test_blocked_proxy_is_retried_with_random_proxy():
    session = FakeSession([FakeResponse(status_code=403), FakeResponse("second")])
    pool = FakePool(working="http://1.1.1.1:80", randoms=["http://2.2.2.2:80"])
    response = ProxyFetcher(pool, session).fetch("GET", "https://site", retries=2)
    assert response.text == "second"
    assert session.requests[1][2]["proxies"]["http"] == "http://2.2.2.2:80"


def test_falls_back_to_direct_after_proxy_failures():
    session = FakeSession([
        requests.ConnectionError("p1"),
        requests.Timeout("p2"),
        FakeResponse("direct"),
    ])
    pool = FakePool(working="http://1.1.1.1:80", randoms=["http://2.2.2.2:80"])
    response = ProxyFetcher(pool, session).fetch("GET", "https://site", retries=1)
    assert response.text == "direct"
    assert len(session.requests) == 3
    assert "proxies" not in session.requests[2][2]


def test_last_proxy_error_raised_when_direct_fails_too():
    session = FakeSession([
        FakeResponse(status_code=429),
        requests.ConnectionError("direct down"),
    ])
    pool = FakePool(working="http://1.1.1.1:80")
    with pytest.raises(ProxyBlockedError):
        ProxyFetcher(pool, session).fetch("GET", "https://site", retries=0)


# Proxy pool

def plain_source(body):
    url = "https://proxies.example/list"
    return url, FakeSession(get_outcomes={url: FakeResponse(body)})


def test_refresh_downloads_and_writes_cache(tmp_path):
    from app.scrapers.proxies import _parse_plain_list

    url, session = plain_source("10.0.0.1:8080\n\nbad-line\n10.0.0.2:3128\n")
    cache_file = str(tmp_path / "proxies.json")
    pool = ProxyPool(cache_file=cache_file, ttl_hours=6, session=session, sources=[(url, _parse_plain_list)])

    proxies = pool.get_proxies()
    assert [proxy_url(p) for p in proxies] == ["http://10.0.0.1:8080", "http://10.0.0.2:3128"]
    with open(cache_file, encoding="utf-8") as f:
        assert json.load(f) == proxies


def test_fresh_cache_is_reused(tmp_path):
    cache_file = tmp_path / "proxies.json"
    cache_file.write_text(json.dumps([{"ip": "9.9.9.9", "port": 80, "protocol": "http"}]), encoding="utf-8")
    pool = ProxyPool(cache_file=str(cache_file), ttl_hours=6, session=FakeSession(), sources=[])

    assert pool.get_proxies()[0]["ip"] == "9.9.9.9"


def test_stale_cache_is_refreshed_with_fallback(tmp_path):
    cache_file = tmp_path / "proxies.json"
    cache_file.write_text(json.dumps([{"ip": "9.9.9.9", "port": 80, "protocol": "http"}]), encoding="utf-8")
    old = time.time() - 7 * 3600
    os.utime(cache_file, (old, old))

    pool = ProxyPool(cache_file=str(cache_file), ttl_hours=6, session=FakeSession(), sources=[])
    assert pool.get_proxies() == FALLBACK_PROXIES


def test_failing_sources_fall_back_to_static_list(tmp_path):
    from app.scrapers.proxies import _parse_geonode

    url = "https://proxies.example/geonode"
    session = FakeSession(get_outcomes={url: requests.ConnectionError("down")})
    pool = ProxyPool(cache_file=str(tmp_path / "p.json"), ttl_hours=6, session=session, sources=[(url, _parse_geonode)])
    assert pool.refresh() == FALLBACK_PROXIES


def test_random_proxy_prefers_protocol(tmp_path):
    cache_file = tmp_path / "proxies.json"
    cache_file.write_text(json.dumps([
        {"ip": "1.1.1.1", "port": 1080, "protocol": "socks5"},
        {"ip": "2.2.2.2", "port": 80, "protocol": "http"},
    ]), encoding="utf-8")
    pool = ProxyPool(cache_file=str(cache_file), ttl_hours=6, session=FakeSession(), sources=[])

    assert pool.random_proxy("http") == "http://2.2.2.2:80"
    assert pool.random_proxy("https") in ("socks5://1.1.1.1:1080", "http://2.2.2.2:80")


def test_working_proxy_probes_until_success(tmp_path, monkeypatch):
    cache_file = tmp_path / "proxies.json"
    cache_file.write_text(json.dumps([
        {"ip": "1.1.1.1", "port": 80, "protocol": "http"},
        {"ip": "2.2.2.2", "port": 80, "protocol": "http"},
    ]), encoding="utf-8")
    pool = ProxyPool(cache_file=str(cache_file), ttl_hours=6, session=FakeSession(), sources=[])
    monkeypatch.setattr(pool, "test_proxy", lambda url: url == "http://2.2.2.2:80")

    assert pool.working_proxy() == "http://2.2.2.2:80"

    monkeypatch.setattr(pool, "test_proxy", lambda url: False)
    assert pool.working_proxy() is None


def test_pool_without_session_opens_one_per_download(tmp_path, monkeypatch):
    from app.scrapers.proxies import _parse_plain_list

    url = "https://proxies.example/list.txt"
    opened = []

    class ClosingSession(FakeSession):
        def __init__(self):
            super().__init__(get_outcomes={url: FakeResponse("10.0.0.1:8080\n")})
            self.closed = False
            opened.append(self)

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            self.closed = True

    monkeypatch.setattr(requests, "Session", ClosingSession)
    pool = ProxyPool(cache_file=str(tmp_path / "p.json"), ttl_hours=6, sources=[(url, _parse_plain_list)])

    pool.refresh()
    pool.refresh()
    assert len(opened) == 2
    assert all(session.closed for session in opened)
