import httpx
import pytest

from agent_readiness.errors import InvalidUrl, NotAFullUrl
from agent_readiness.scorer import NO_PAGES_ERROR, score

HOME = """
<html><head>
  <script src="https://www.google.com/recaptcha/api.js"></script>
</head><body>
  <a href="/docs/quickstart">Quickstart</a>
  <a href="/pricing">Pricing</a>
  <a href="/blog/launch">Launch post</a>
  <a href="https://docs.acme.com/reference/">API reference</a>
  <p>Get started with the REST API. Sign up, no credit card required.</p>
</body></html>
"""

PRICING = "<p>Starter $29 per month. Enterprise: contact sales. Set a spend limit.</p>"
QUICKSTART = "<p>Use the sandbox. Responses are JSON. pip install acme. Rate limit: 100 requests per minute.</p>"
REFERENCE = "<p>Complete identity verification before going live. 99.9% uptime SLA.</p>"
TERMS = "<p>Automated access via the API is permitted.</p>"


def _acme(fake_site, default=httpx.ReadTimeout):
    return fake_site(
        {
            "acme.com/": HOME,
            "acme.com/pricing": PRICING,
            "acme.com/terms": TERMS,
            "acme.com/docs/quickstart": QUICKSTART,
            "docs.acme.com/reference": REFERENCE,
        },
        default=default,
    )


def test_scores_a_site_end_to_end(with_fetcher, fake_site, settings):
    site = _acme(fake_site)
    result = with_fetcher(site, lambda f: score("www.acme.com", settings=settings, fetcher=f))

    assert result.url == "https://acme.com"
    assert result.errors == []
    assert set(result.crawled_pages) == {
        "https://acme.com",
        "https://acme.com/pricing",
        "https://acme.com/terms",
        "https://acme.com/docs/quickstart",
        "https://docs.acme.com/reference",
    }
    assert "acme.com/blog/launch" not in site.paths_requested()

    signup = result.sub_score("Programmatic signup")
    assert (signup.score, signup.friction_type) == (1, "regulatory")
    assert result.sub_score("No CAPTCHA").score == 0
    assert result.sub_score("Transparent pricing").score == 2
    assert result.sub_score("ToS allows automated/agent usage").score == 2
    assert result.sub_score("Sandbox/test environment").score == 2

    summary = result.friction_summary
    assert summary.agent_ready_pending is True
    assert summary.voluntary_friction == ["CAPTCHA is a design choice, blocks agents entirely"]
    assert len(summary.regulatory_friction) == 1

    assert result.total_score == sum(c.score for c in result.categories)
    assert 0 <= result.total_score <= 40
    for cat in result.categories:
        assert cat.score == min(10, sum(s.score for s in cat.sub_scores))


def test_timeouts_elsewhere_do_not_stop_the_run(with_fetcher, fake_site, settings):
    site = fake_site({"acme.com/": "<p>home</p>", "acme.com/docs": "<p>API reference</p>"}, default=httpx.ReadTimeout)
    result = with_fetcher(site, lambda f: score("acme.com", settings=settings, fetcher=f))

    assert result.errors == []
    assert sorted(result.crawled_pages) == ["https://acme.com", "https://acme.com/docs"]
    assert result.sub_score("Public API with docs").score == 3


def test_unreachable_site_still_gets_a_result(with_fetcher, fake_site, settings):
    result = with_fetcher(fake_site({}, default=httpx.ConnectError), lambda f: score("acme.com", settings=settings, fetcher=f))

    assert result.errors == [NO_PAGES_ERROR]
    assert result.crawled_pages == []
    # Nothing was seen, so the only points are for the CAPTCHA that wasn't found.
    assert result.total_score == 2
    assert result.sub_score("No CAPTCHA").score == 2
    assert result.grade == "F"


def test_large_site_is_capped_at_thirty_pages(with_fetcher, fake_site, settings):
    links = "".join(f'<a href="/docs/topic-{i}">t</a>' for i in range(35))
    routes = {"acme.com/": links}
    routes.update({f"acme.com/docs/topic-{i}": "<p>doc</p>" for i in range(35)})

    result = with_fetcher(fake_site(routes), lambda f: score("acme.com", settings=settings, fetcher=f))
    assert len(result.crawled_pages) == 30


@pytest.mark.parametrize("raw, error", [("stripe", NotAFullUrl), ("ftp://acme.com", InvalidUrl)])
def test_bad_input_fails_before_any_request(with_fetcher, fake_site, settings, raw, error):
    site = fake_site({})
    with pytest.raises(error):
        with_fetcher(site, lambda f: score(raw, settings=settings, fetcher=f))
    assert site.requests == []
