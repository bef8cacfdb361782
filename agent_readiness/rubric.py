"""The agent-readiness rubric.

Every signal is one row of ``RUBRIC``: which category it feeds, how many points
it is worth, the keyword sets it looks for and the function that turns a
corpus into a sub-score. Evaluators only read the corpus, except the OpenAPI
signal, which also probes a few well-known spec locations directly.

Friction tagging: regulatory friction (KYC/AML) costs half the signup points,
voluntary friction (sales-gated onboarding, CAPTCHAs) costs all of them.
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

from .config import Settings
from .corpus import Corpus
from .fetcher import Fetcher
from .models import FrictionType, SubScore
from .urls import Target

DISCOVERY = "DISCOVERY"
PURCHASE = "PURCHASE"
INTEGRATION = "INTEGRATION"
TRUST = "TRUST"


@dataclass(frozen=True)
class Category:
    name: str
    description: str
    max_points: int = 10


CATEGORIES = (
    Category(DISCOVERY, "Can an agent find this?"),
    Category(PURCHASE, "Can an agent buy it?"),
    Category(INTEGRATION, "Can an agent use it?"),
    Category(TRUST, "Would an owner allow it?"),
)


@dataclass(frozen=True)
class RubricContext:
    corpus: Corpus
    target: Target
    fetcher: Fetcher
    settings: Settings


@dataclass
class _Tally:
    score: int = 0
    findings: list[str] = field(default_factory=list)
    friction_type: FrictionType = "none"
    friction_note: str | None = None


Evaluator = Callable[[RubricContext, "Signal"], Awaitable[_Tally]]


@dataclass(frozen=True)
class Signal:
    key: str
    category: str
    name: str
    max_points: int
    keywords: Mapping[str, tuple[str, ...]]
    evaluate: Evaluator

    async def score(self, ctx: RubricContext) -> SubScore:
        tally = await self.evaluate(ctx, self)
        return SubScore(
            name=self.name,
            max_points=self.max_points,
            score=max(0, min(self.max_points, tally.score)),
            findings=tally.findings,
            friction_type=tally.friction_type,
            friction_note=tally.friction_note,
        )


def _head(found: list[str], n: int | None) -> str:
    return ", ".join(found if n is None else found[:n])


def _presence(found_label: str, missing: str, show: int | None = 3) -> Evaluator:
    """All-or-nothing signal: full points if any ``any`` keyword appears."""

    async def evaluate(ctx: RubricContext, sig: Signal) -> _Tally:
        tally = _Tally()
        found = ctx.corpus.has_any(sig.keywords["any"])
        if found:
            tally.score = sig.max_points
            tally.findings.append(f"{found_label}: {_head(found, show)}")
        else:
            tally.findings.append(missing)
        return tally

    return evaluate


# ----- DISCOVERY -----

async def _public_api_docs(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    mentions = ctx.corpus.has_any(sig.keywords["text"])
    links = ctx.corpus.links_have_any(sig.keywords["links"])
    if mentions:
        tally.score += 2
        tally.findings.append(f"Found API doc references: {_head(mentions, None)}")
    if links:
        tally.score = min(sig.max_points, tally.score + 1)
        tally.findings.append("Found API-related links")
    if ctx.corpus.has_page(*sig.keywords["pages"]):
        tally.score = min(sig.max_points, tally.score + 1)
        tally.findings.append("Dedicated docs/API page accessible")
    if tally.score == 0:
        tally.findings.append("No public API documentation detected")
    return tally


async def _machine_readable_pricing(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    keywords = ctx.corpus.has_any(sig.keywords["text"])
    structured = ctx.corpus.has_any(sig.keywords["structured"])
    if ctx.corpus.has_page(*sig.keywords["pages"]):
        tally.score += 1
        tally.findings.append("Pricing page found")
    if keywords:
        tally.score = min(2, tally.score + 1)
        tally.findings.append(f"Pricing keywords: {_head(keywords, 3)}")
    if structured:
        tally.score = sig.max_points
        tally.findings.append("Structured pricing data (schema.org) detected")
    if tally.score == 0:
        tally.findings.append("No machine-readable pricing detected")
    return tally


async def _directory_listings(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    found = ctx.corpus.has_any(sig.keywords["any"])
    if found:
        tally.score = min(sig.max_points, len(found))
        tally.findings.append(f"Directory mentions: {_head(found, None)}")
    else:
        tally.findings.append("No agent/API directory listings detected (hard to verify automatically)")
    return tally


async def _openapi_spec(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    found = ctx.corpus.has_any(sig.keywords["text"])
    if found:
        tally.score = sig.max_points
        tally.findings.append(f"OpenAPI/Swagger indicators: {_head(found, None)}")

    paths = sig.keywords["spec_paths"]
    probes = await asyncio.gather(*(
        ctx.fetcher.fetch(ctx.target.origin + path, timeout=ctx.settings.probe_timeout, retries=0)
        for path in paths
    ))
    for path, res in zip(paths, probes):
        if res is not None and res.status == 200 and '"openapi"' in res.body:
            tally.score = sig.max_points
            tally.findings.append(f"OpenAPI spec found at {path}")
            break

    if tally.score == 0:
        tally.findings.append("No OpenAPI/Swagger spec detected")
    return tally


# ----- PURCHASE -----

async def _programmatic_signup(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    signup = ctx.corpus.has_any(sig.keywords["signup"])
    self_serve = ctx.corpus.has_any(sig.keywords["self_serve"])
    kyc = ctx.corpus.has_any(sig.keywords["kyc"])
    sales_gated = ctx.corpus.has_any(sig.keywords["sales_gated"])

    if kyc:
        tally.score = 1
        tally.friction_type = "regulatory"
        tally.friction_note = "KYC/identity verification required by regulation, not a design choice"
        tally.findings.append(f"Regulatory friction (half penalty): {_head(kyc, 3)}")
    elif sales_gated and not signup:
        tally.score = 0
        tally.friction_type = "voluntary"
        tally.friction_note = "Manual onboarding by design choice, blocks agents"
        tally.findings.append(f"Voluntary friction: {_head(sales_gated, 2)}")
    elif self_serve:
        tally.score = 2
        tally.findings.append(f"Self-serve indicators: {_head(self_serve, 2)}")
    elif signup:
        tally.score = 1
        tally.findings.append(f"Signup indicators: {_head(signup, 3)}")
    else:
        tally.findings.append("No programmatic signup flow detected")
    return tally


async def _no_captcha(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally(score=sig.max_points)
    found = ctx.corpus.has_any(sig.keywords["any"])
    if found:
        tally.score = 0
        tally.friction_type = "voluntary"
        tally.friction_note = "CAPTCHA is a design choice, blocks agents entirely"
        tally.findings.append(f"CAPTCHA detected (voluntary friction): {_head(found, None)}")
    else:
        tally.findings.append("No CAPTCHA detected on crawled pages")
    return tally


async def _usage_billing(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    metered = ctx.corpus.has_any(sig.keywords["metered"])
    if metered:
        tally.score = 2
        tally.findings.append(f"Usage-based billing: {_head(metered, 2)}")
    elif ctx.corpus.has_any(sig.keywords["subscription"]):
        tally.score = 1
        tally.findings.append("Traditional subscription billing detected")
    else:
        tally.findings.append("No billing model detected")
    return tally


# ----- INTEGRATION -----

async def _structured_output(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    json_hits = ctx.corpus.has_any(sig.keywords["json"])
    sdk_hits = ctx.corpus.has_any(sig.keywords["sdk"])
    if json_hits:
        tally.score += 2
        tally.findings.append(f"JSON/structured output: {_head(json_hits, 3)}")
    if sdk_hits:
        tally.score = min(sig.max_points, tally.score + 1)
        tally.findings.append(f"SDK/client libraries: {_head(sdk_hits, 2)}")
    if tally.score == 0:
        tally.findings.append("No structured JSON output detected")
    return tally


# ----- TRUST -----

async def _transparent_pricing(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    sales = ctx.corpus.has_any(sig.keywords["contact_sales"])
    prices = ctx.corpus.has_any(sig.keywords["prices"])
    if sales and not prices:
        tally.findings.append(f"Opaque pricing: {_head(sales, None)}")
    elif prices:
        # A sales contact next to public prices reads as an enterprise tier.
        tally.score = 2 if sales else 3
        tally.findings.append("Public pricing found")
        if sales:
            tally.findings.append("Also has 'contact sales' (likely enterprise tier)")
    else:
        tally.findings.append("No pricing information detected")
    return tally


async def _sla(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    mentions = ctx.corpus.has_any(sig.keywords["text"])
    status_page = ctx.corpus.has_page(*sig.keywords["pages"])
    if mentions or status_page:
        tally.score = sig.max_points
        if status_page:
            tally.findings.append("Status/SLA page accessible")
        if mentions:
            tally.findings.append(f"SLA mentions: {_head(mentions, 3)}")
    else:
        tally.findings.append("No SLA or uptime guarantees detected")
    return tally


async def _tos_automation(ctx: RubricContext, sig: Signal) -> _Tally:
    tally = _Tally()
    tos_page = ctx.corpus.has_page(*sig.keywords["pages"])
    automated = ctx.corpus.has_any(sig.keywords["automated"])
    anti_bot = ctx.corpus.has_any(sig.keywords["anti_bot"])
    if tos_page:
        tally.score += 1
        tally.findings.append("Terms of Service page found")
    if automated and not anti_bot:
        tally.score = 2
        tally.findings.append("Appears to allow automated usage")
    elif anti_bot:
        tally.score = 0
        tally.findings.append(f"May restrict automated use: {_head(anti_bot, None)}")
    if tally.score == 0 and not tos_page:
        tally.findings.append("No Terms of Service found to evaluate")
    return tally


RUBRIC: tuple[Signal, ...] = (
    # DISCOVERY
    Signal(
        "public_api_docs", DISCOVERY, "Public API with docs", 3,
        {
            "text": ("api documentation", "api reference", "api docs", "developer docs", "rest api", "graphql api"),
            "links": ("/api", "/docs", "/developer", "/reference", "/api-docs"),
            "pages": ("/docs", "/api", "/api-docs", "/documentation"),
        },
        _public_api_docs,
    ),
    Signal(
        "machine_readable_pricing", DISCOVERY, "Machine-readable pricing", 3,
        {
            "text": ("pricing", "price", "per month", "/mo", "free tier", "free plan", "pay as you go", "usage-based"),
            "structured": ("application/ld+json", "schema.org/offer", "schema.org/product", 'itemtype="http'),
            "pages": ("/pricing",),
        },
        _machine_readable_pricing,
    ),
    Signal(
        "directory_listings", DISCOVERY, "Listed in agent directories", 2,
        {
            "any": (
                "rapidapi", "programmableweb", "api marketplace", "api directory",
                "agent directory", "mcp server", "agent protocol",
            ),
        },
        _directory_listings,
    ),
    Signal(
        "openapi_spec", DISCOVERY, "Structured metadata / OpenAPI spec", 2,
        {
            "text": (
                "openapi", "swagger", "api-spec", "openapi.json", "openapi.yaml",
                "swagger.json", "swagger.yaml", "redoc",
            ),
            "spec_paths": ("/openapi.json", "/swagger.json", "/api-docs/swagger.json", "/.well-known/openapi.json"),
        },
        _openapi_spec,
    ),
    # PURCHASE
    Signal(
        "programmatic_signup", PURCHASE, "Programmatic signup", 2,
        {
            "signup": (
                "api key", "get started", "sign up", "create account", "register",
                "get api key", "instant access",
            ),
            "self_serve": ("no credit card", "instant", "self-serve", "self-service", "automatic"),
            "kyc": (
                "kyc", "know your customer", "identity verification", "id verification", "aml",
                "anti-money laundering", "verify your identity", "government id", "ssn", "passport",
                "drivers license", "proof of address", "accredited investor",
            ),
            "sales_gated": (
                "contact sales", "request demo", "book a demo", "talk to sales", "schedule a call", "request access",
            ),
        },
        _programmatic_signup,
    ),
    Signal(
        "no_captcha", PURCHASE, "No CAPTCHA", 2,
        {"any": ("recaptcha", "hcaptcha", "captcha", "g-recaptcha", "cf-turnstile", "turnstile")},
        _no_captcha,
    ),
    Signal(
        "usage_billing", PURCHASE, "API-based / usage-based billing", 2,
        {
            "metered": (
                "usage-based", "pay per use", "pay as you go", "per request", "per call",
                "metered", "per api call", "per token",
            ),
            "subscription": ("subscription", "monthly", "annual", "enterprise"),
        },
        _usage_billing,
    ),
    Signal(
        "crypto_payments", PURCHASE, "Accepts crypto/stablecoin", 2,
        {
            "any": (
                "crypto", "cryptocurrency", "bitcoin", "ethereum", "usdc", "usdt",
                "stablecoin", "web3", "wallet",
            ),
        },
        _presence("Crypto mentions", "No cryptocurrency payment options detected"),
    ),
    Signal(
        "agent_payment_protocols", PURCHASE, "Supports x402, UCP, or AP2", 2,
        {"any": ("x402", "ucp", "agent protocol", "ap2", "402 payment", "http 402", "machine-payable")},
        _presence("Agent payment protocols", "No agent payment protocols (x402/UCP/AP2) detected", show=None),
    ),
    # INTEGRATION
    Signal(
        "mcp_a2a", INTEGRATION, "MCP or A2A support", 3,
        {
            "any": (
                "model context protocol", "mcp", "agent-to-agent", "a2a", "mcp server",
                "mcp tool", "function calling",
            ),
        },
        _presence("MCP/A2A indicators", "No MCP or A2A support detected"),
    ),
    Signal(
        "structured_output", INTEGRATION, "Structured output (JSON)", 3,
        {
            "json": (
                "json response", "json api", "application/json", "rest api", "graphql",
                "json output", "json format", "returns json",
            ),
            "sdk": ("sdk", "client library", "npm install", "pip install", "gem install", "nuget"),
        },
        _structured_output,
    ),
    Signal(
        "sandbox", INTEGRATION, "Sandbox/test environment", 2,
        {
            "any": (
                "sandbox", "test mode", "test environment", "playground", "try it",
                "interactive", "api console", "api explorer",
            ),
        },
        _presence("Sandbox/test", "No sandbox or test environment detected"),
    ),
    Signal(
        "rate_limits", INTEGRATION, "Clear rate limits & error handling", 2,
        {
            "any": (
                "rate limit", "rate-limit", "throttl", "429", "quota", "requests per", "rpm",
                "rps", "error code", "error handling", "status code",
            ),
        },
        _presence("Rate limit/error docs", "No rate limit documentation detected"),
    ),
    # TRUST
    Signal(
        "transparent_pricing", TRUST, "Transparent pricing", 3,
        {
            "contact_sales": (
                "contact sales", "contact us for pricing", "request a quote", "custom pricing", "talk to sales",
            ),
            "prices": ("$", "€", "£", "free", "per month", "/mo", "/year", "starting at"),
        },
        _transparent_pricing,
    ),
    Signal(
        "spend_controls", TRUST, "Spend controls and usage caps", 3,
        {
            "any": (
                "spend limit", "usage cap", "budget", "spending limit", "cost control",
                "billing alert", "usage alert", "hard limit", "soft limit",
            ),
        },
        _presence("Spend controls", "No spend controls or usage caps detected"),
    ),
    Signal(
        "sla", TRUST, "SLA / uptime guarantees", 2,
        {
            "text": ("sla", "uptime", "99.9", "99.99", "availability", "service level", "status page"),
            "pages": ("/status", "/sla"),
        },
        _sla,
    ),
    Signal(
        "tos_automation", TRUST, "ToS allows automated/agent usage", 2,
        {
            "pages": ("/terms", "/tos", "/terms-of-service", "/legal"),
            "automated": ("automated", "programmatic access", "bot", "machine", "agent", "non-human"),
            "anti_bot": ("no automated", "prohibit automated", "no bots", "no scraping", "human only"),
        },
        _tos_automation,
    ),
)


def signals_for(category: str) -> list[Signal]:
    return [s for s in RUBRIC if s.category == category]


async def evaluate_rubric(ctx: RubricContext) -> dict[str, list[SubScore]]:
    """Sub-scores per category name, in table order."""
    scored = await asyncio.gather(*(sig.score(ctx) for sig in RUBRIC))
    by_category: dict[str, list[SubScore]] = {c.name: [] for c in CATEGORIES}
    for sig, sub in zip(RUBRIC, scored):
        by_category[sig.category].append(sub)
    return by_category
