import json

from agent_readiness import cli
from agent_readiness.aggregator import aggregate


def test_prints_the_result_as_json(monkeypatch, capsys):
    async def fake_score(raw_url, *, settings=None, fetcher=None):
        return aggregate("https://acme.com", {}, ["https://acme.com"], [], result_id="cafe0001")

    monkeypatch.setattr(cli, "score", fake_score)

    assert cli.main(["acme.com", "--indent", "0"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["id"] == "cafe0001"
    assert data["crawledPages"] == ["https://acme.com"]
    assert data["grade"] == "F"


def test_bad_input_exits_with_usage_error(capsys):
    assert cli.main(["stripe"]) == 2
    assert "doesn't look like a full URL" in capsys.readouterr().err
