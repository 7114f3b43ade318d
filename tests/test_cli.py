import json

from click.testing import CliRunner

from fakes import game_handler, master_handler
from tw_browser.cli import main


def _run(*args, env=None):
    result = CliRunner().invoke(main, list(args), env=env)
    return result, json.loads(result.output.strip().splitlines()[-1])


def _write_config(tmp_path, masters):
    path = tmp_path / "browser.yaml"
    lines = ["master_timeout: 1", "server_timeout: 1", "master_servers:"]
    lines += [f"  - {m}" for m in masters]
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


class TestListCommand:
    def test_lists_servers_of_configured_masters(self, udp_servers, tmp_path):
        server = udp_servers(game_handler("cli server"))
        master = udp_servers(master_handler([("127.0.0.1", server.port)]))
        config = _write_config(tmp_path, [master.address])

        result, output = _run("--config", str(config), "list")

        assert result.exit_code == 0
        assert output["success"] is True
        assert output["command"] == "list"
        assert output["data"]["summary"]["servers"] == 1
        assert output["data"]["servers"][0]["name"] == "cli server"
        assert output["data"]["master_servers"] == [master.address]

    def test_config_from_environment(self, udp_servers, tmp_path):
        master = udp_servers(master_handler([]))
        config = _write_config(tmp_path, [master.address])

        result, output = _run("list", env={"TW_BROWSER_CONFIG": str(config)})

        assert result.exit_code == 0
        assert output["data"]["servers"] == []
        assert output["message"] == "Found 0 servers"

    def test_saves_report(self, udp_servers, tmp_path):
        master = udp_servers(master_handler([]))
        config = _write_config(tmp_path, [master.address])
        report = tmp_path / "reports" / "servers.json"

        result, _ = _run("--config", str(config), "list", "--save-report", str(report))

        assert result.exit_code == 0
        assert json.loads(report.read_text(encoding="utf-8"))["summary"]["servers"] == 0

    def test_invalid_config(self, tmp_path):
        path = tmp_path / "browser.yaml"
        path.write_text("retries: 3\n", encoding="utf-8")

        result, output = _run("--config", str(path), "list")

        assert result.exit_code == 1
        assert output["success"] is False
        assert "Unknown field" in output["message"]


class TestInfoCommand:
    def test_info(self, udp_servers):
        server = udp_servers(game_handler("single"))

        result, output = _run("info", "127.0.0.1", str(server.port), "--timeout", "1")

        assert result.exit_code == 0
        assert output["data"]["name"] == "single"
        assert output["data"]["address"] == server.address

    def test_pretty_output(self, udp_servers):
        server = udp_servers(game_handler("pretty"))

        result = CliRunner().invoke(
            main, ["--pretty", "info", "127.0.0.1", str(server.port), "--timeout", "1"]
        )

        assert result.exit_code == 0
        assert result.output.startswith("{\n  ")
        assert json.loads(result.output)["data"]["name"] == "pretty"

    def test_invalid_ip(self):
        result, output = _run("info", "not-an-ip", "8303")

        assert result.exit_code == 1
        assert output["success"] is False
        assert "invalid ip" in output["message"]


class TestMastersCommand:
    def test_counts(self, udp_servers, tmp_path):
        master = udp_servers(master_handler([("10.0.0.1", 1), ("10.0.0.2", 2)]))
        silent = udp_servers(lambda signature, rest: None, answer=False)
        config = _write_config(tmp_path, [master.address, silent.address])

        result, output = _run("--config", str(config), "masters", "--timeout", "0.3")

        assert result.exit_code == 0
        counts = {entry["address"]: entry for entry in output["data"]}
        assert counts[master.address]["count"] == 2
        assert counts[silent.address]["count"] is None
        assert counts[silent.address]["error"]
        assert output["message"] == "1 of 2 master servers reachable"

    def test_unresolvable_master_is_reported(self, udp_servers, tmp_path):
        master = udp_servers(master_handler([("10.0.0.1", 1)]))
        config = _write_config(tmp_path, [master.address, "missing-port"])

        result, output = _run("--config", str(config), "masters", "--timeout", "0.3")

        assert result.exit_code == 0
        counts = {entry["address"]: entry for entry in output["data"]}
        assert counts[master.address]["count"] == 1
        assert counts["missing-port"]["count"] is None
        assert counts["missing-port"]["error"]
