"""Tests for the command-line interface."""

import json

import pytest
import respx
from click.testing import CliRunner
from httpx import Response

from dohping import __version__
from dohping.cli import main
from dohping.runner import LookupRunner
from tests.conftest import FakeProber, envelope


@pytest.fixture
def cli_prober(monkeypatch, twelve_ms_stats):
    """Replace ICMP probing in the CLI with canned statistics."""
    probers = []

    def build(config):
        prober = FakeProber(twelve_ms_stats)
        prober.config = config
        probers.append(prober)
        return prober

    monkeypatch.setattr("dohping.cli.ICMPProber", build)
    return probers


@pytest.fixture
def cli_runners(monkeypatch):
    """Record every LookupRunner the CLI builds."""
    runners = []

    class RecordingRunner(LookupRunner):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            runners.append(self)

    monkeypatch.setattr("dohping.cli.LookupRunner", RecordingRunner)
    return runners


class TestQueryCommand:
    """Test the query command."""

    @respx.mock
    def test_json_output(self, cli_prober, example_envelope):
        respx.get("https://doh.test/dns-query").mock(
            return_value=Response(200, json=example_envelope)
        )

        result = CliRunner().invoke(
            main,
            ["query", "--host", "example.com", "-c", "test=https://doh.test/dns-query", "--json"],
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        [row] = data["rows"]
        assert row["resolver"] == "test"
        assert row["address"] == "93.184.216.34"
        assert row["ttl"] == 300
        assert row["mean_latency_ms"] == 12
        assert row["loss_ratio"] == 0.2

    @respx.mock
    def test_one_malformed_resolver_of_three(self, cli_prober):
        respx.get("https://a.test/dns-query").mock(
            return_value=Response(200, json=envelope(("example.com", 1, 300, "192.0.2.1")))
        )
        respx.get("https://b.test/dns-query").mock(return_value=Response(200, text="garbage"))
        respx.get("https://c.test/dns-query").mock(
            return_value=Response(200, json=envelope(("example.com", 1, 300, "192.0.2.3")))
        )

        result = CliRunner().invoke(
            main,
            [
                "query",
                "--host", "example.com",
                "-c", "a=https://a.test/dns-query",
                "-c", "b=https://b.test/dns-query",
                "-c", "c=https://c.test/dns-query",
                "--json",
                "--sort",
            ],
        )

        assert result.exit_code == 0
        rows = json.loads(result.stdout)["rows"]
        assert [r["resolver"] for r in rows] == ["a", "c"]
        diagnostics = [line for line in result.stderr.splitlines() if " error: " in line]
        assert diagnostics == [diagnostics[0]]
        assert diagnostics[0].startswith("b error: decode error")

    @respx.mock
    def test_table_output(self, cli_prober, example_envelope):
        respx.get("https://doh.test/dns-query").mock(
            return_value=Response(200, json=example_envelope)
        )

        result = CliRunner().invoke(
            main,
            ["query", "--host", "example.com", "-c", "test=https://doh.test/dns-query", "-q"],
        )

        assert result.exit_code == 0
        assert "93.184.216.34" in result.stdout
        assert "12ms" in result.stdout
        assert "20%" in result.stdout

    @respx.mock
    def test_save_csv(self, cli_prober, example_envelope, tmp_path):
        respx.get("https://doh.test/dns-query").mock(
            return_value=Response(200, json=example_envelope)
        )
        path = tmp_path / "rows.csv"

        result = CliRunner().invoke(
            main,
            [
                "query",
                "--host", "example.com",
                "-c", "test=https://doh.test/dns-query",
                "-q",
                "-o", str(path),
            ],
        )

        assert result.exit_code == 0
        assert "93.184.216.34" in path.read_text()

    @respx.mock
    def test_probe_options_reach_prober(self, cli_prober):
        respx.get("https://doh.test/dns-query").mock(
            return_value=Response(200, json={"Status": 0})
        )

        result = CliRunner().invoke(
            main,
            [
                "query",
                "--host", "example.com",
                "-c", "test=https://doh.test/dns-query",
                "--count", "4",
                "--interval", "0.2",
                "--timeout", "0.5",
                "--unprivileged",
                "--json",
            ],
        )

        assert result.exit_code == 0
        [prober] = cli_prober
        assert prober.config.count == 4
        assert prober.config.interval == 0.2
        assert prober.config.timeout == 0.5
        assert prober.config.privileged is False

    @respx.mock
    def test_options_from_environment(self, cli_prober):
        respx.get("https://doh.test/dns-query").mock(
            return_value=Response(200, json={"Status": 0})
        )

        result = CliRunner().invoke(
            main,
            ["query", "-c", "test=https://doh.test/dns-query", "--json"],
            env={"DOHPING_QUERY_HOST": "example.com", "DOHPING_QUERY_COUNT": "3"},
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.stdout)["hostname"] == "example.com"
        assert cli_prober[0].config.count == 3

    def test_unknown_resolver_is_configuration_error(self, cli_prober):
        result = CliRunner().invoke(main, ["query", "--host", "example.com", "-r", "nope"])

        assert result.exit_code == 2
        assert "Unknown resolver" in result.stderr
        assert cli_prober == []

    def test_invalid_probe_count(self, cli_prober):
        result = CliRunner().invoke(
            main,
            ["query", "--host", "example.com", "--count", "0"],
        )

        assert result.exit_code == 2
        assert "probe count" in result.stderr

    @respx.mock
    def test_auto_deadline(self, cli_prober, cli_runners):
        respx.get("https://doh.test/dns-query").mock(
            return_value=Response(200, json={"Status": 0})
        )

        result = CliRunner().invoke(
            main,
            [
                "query",
                "--host", "example.com",
                "-c", "test=https://doh.test/dns-query",
                "--count", "2",
                "--interval", "0.5",
                "--http-timeout", "4",
                "--auto-deadline", "3",
                "--json",
            ],
        )

        assert result.exit_code == 0, result.output
        # 4s for the query plus 3 addresses of 2 x 1s timeouts
        assert cli_runners[0].deadline == 10.0

    @respx.mock
    def test_explicit_deadline_wins(self, cli_prober, cli_runners):
        respx.get("https://doh.test/dns-query").mock(
            return_value=Response(200, json={"Status": 0})
        )

        result = CliRunner().invoke(
            main,
            [
                "query",
                "--host", "example.com",
                "-c", "test=https://doh.test/dns-query",
                "--deadline", "7.5",
                "--auto-deadline", "3",
                "--json",
            ],
        )

        assert result.exit_code == 0, result.output
        assert cli_runners[0].deadline == 7.5

    def test_zero_timeout_is_configuration_error(self, cli_prober):
        result = CliRunner().invoke(
            main,
            ["query", "--host", "example.com", "--timeout", "0"],
        )

        assert result.exit_code == 2
        assert "probe timeout" in result.stderr
        assert cli_prober == []

    def test_host_is_required(self):
        result = CliRunner().invoke(main, ["query"])

        assert result.exit_code == 2
        assert "--host" in result.stderr


class TestOtherCommands:
    """Test auxiliary commands."""

    def test_list_available(self):
        result = CliRunner().invoke(main, ["list-available"])

        assert result.exit_code == 0
        assert "aliyun" in result.stdout
        assert "1.1.1.1" in result.stdout

    def test_version(self):
        result = CliRunner().invoke(main, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout
