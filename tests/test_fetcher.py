import asyncio
import dataclasses

import httpx

from agent_readiness.fetcher import FetchResult


def test_returns_body_and_status_with_browser_headers(with_fetcher):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, text="<h1>hi</h1>")

    result = with_fetcher(handler, lambda f: f.fetch("https://acme.com/docs"))

    assert result == FetchResult(body="<h1>hi</h1>", status=200)
    assert seen[0].headers["user-agent"] == "agent-readiness-tests/1.0"
    assert seen[0].headers["accept-language"].startswith("en-US")
    assert "text/html" in seen[0].headers["accept"]


def test_error_statuses_are_returned_not_raised(with_fetcher):
    result = with_fetcher(lambda r: httpx.Response(503, text="down"), lambda f: f.fetch("https://acme.com"))
    assert result.status == 503


def test_redirects_are_followed(with_fetcher):
    def handler(request):
        if request.url.path == "/old":
            return httpx.Response(301, headers={"location": "https://acme.com/new"})
        return httpx.Response(200, text=f"at {request.url.path}")

    result = with_fetcher(handler, lambda f: f.fetch("https://acme.com/old"))
    assert result == FetchResult(body="at /new", status=200)


def test_gives_up_after_retries(with_fetcher, settings):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("refused", request=request)

    retrying = dataclasses.replace(settings, fetch_retries=2)
    result = with_fetcher(handler, lambda f: f.fetch("https://acme.com"), settings=retrying)

    assert result is None
    assert len(calls) == 3


def test_explicit_retries_override_settings(with_fetcher, settings):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("refused", request=request)

    retrying = dataclasses.replace(settings, fetch_retries=2)
    with_fetcher(handler, lambda f: f.fetch("https://acme.com", retries=0), settings=retrying)
    assert len(calls) == 1


def test_recovers_from_a_transient_failure(with_fetcher, settings):
    calls = []

    def handler(request):
        calls.append(request)
        if len(calls) == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(200, text="ok")

    retrying = dataclasses.replace(settings, fetch_retries=1)
    result = with_fetcher(handler, lambda f: f.fetch("https://acme.com"), settings=retrying)
    assert result == FetchResult(body="ok", status=200)


def test_slow_responses_time_out(with_fetcher):
    async def handler(request):
        await asyncio.sleep(1)
        return httpx.Response(200, text="too late")

    result = with_fetcher(handler, lambda f: f.fetch("https://acme.com", timeout=0.05, retries=0))
    assert result is None


def test_retry_waits_grow_linearly(with_fetcher, settings, monkeypatch):
    waits = []

    async def fake_sleep(seconds):
        waits.append(seconds)

    monkeypatch.setattr(asyncio, "sleep", fake_sleep)

    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    retrying = dataclasses.replace(settings, fetch_retries=2, retry_backoff=0.25)
    result = with_fetcher(handler, lambda f: f.fetch("https://acme.com"), settings=retrying)

    assert result is None
    assert waits == [0.25, 0.5]
