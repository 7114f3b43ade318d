"""CLI entry point for the server browser.

Usage:
    tw-browser list [--master-timeout S] [--server-timeout S]
    tw-browser info <ip> <port> [--timeout S]
    tw-browser masters [--timeout S]

Every command prints a single JSON object:
    {"success": bool, "command": str, "data": ..., "message": str}
"""

import logging
import sys
import time
from typing import Optional

import click

from .config import BrowserConfig, load_config
from .discovery.browser import (
    get_server_count,
    get_server_info_with_timeout,
    server_infos_with_timeouts,
)
from .discovery.master_servers import master_server_addresses, resolve_master_server
from .errors import BrowserError
from .reporting.json_reporter import JsonReporter

CONFIG_ENV = "TW_BROWSER_CONFIG"


def output(payload: dict, pretty: bool = False) -> None:
    """Print a JSON output object."""
    click.echo(JsonReporter().to_json_string(payload, pretty=pretty))


def output_error(command: str, message: str, **extra) -> None:
    """Output error in JSON format and exit with status 1."""
    output(JsonReporter().generate_flow_output(command, extra or None, message, success=False))
    sys.exit(1)


def _load(config_path: Optional[str]) -> BrowserConfig:
    if not config_path:
        return BrowserConfig()
    try:
        return load_config(config_path)
    except (FileNotFoundError, BrowserError) as e:
        output_error("config", f"Failed to load config: {e}")


@click.group()
@click.option("--config", "config_path", envvar=CONFIG_ENV, type=click.Path(dir_okay=False),
              help=f"YAML config file (env: {CONFIG_ENV}).")
@click.option("-v", "--verbose", is_flag=True, help="Log retries and failed peers to stderr.")
@click.option("--pretty", is_flag=True, help="Pretty print output.")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], verbose: bool, pretty: bool):
    """Teeworlds server browser."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    ctx.obj = {"config": _load(config_path), "pretty": pretty}


@main.command("list")
@click.option("--master-timeout", type=float, help="Budget per master server query in seconds.")
@click.option("--server-timeout", type=float, help="Budget per server info query in seconds.")
@click.option("--save-report", type=click.Path(dir_okay=False), help="Also save the report to a file.")
@click.pass_obj
def list_servers(obj: dict, master_timeout: Optional[float], server_timeout: Optional[float],
                 save_report: Optional[str]):
    """Query all master servers and every server they list."""
    config: BrowserConfig = obj["config"]
    reporter = JsonReporter()

    masters = master_server_addresses(config.master_servers)
    start_time = time.time()
    infos = server_infos_with_timeouts(
        master_timeout or config.master_timeout,
        server_timeout or config.server_timeout,
        master_servers=masters,
        config=config,
    )
    duration_ms = int((time.time() - start_time) * 1000)

    report = reporter.generate(infos, duration_ms=duration_ms, master_servers=masters)
    if save_report:
        reporter.save(report, save_report)

    output(
        reporter.generate_flow_output("list", report, f"Found {len(infos)} servers"),
        obj["pretty"],
    )


@main.command("info")
@click.argument("ip")
@click.argument("port", type=int)
@click.option("--timeout", type=float, help="Budget for the query in seconds.")
@click.pass_obj
def server_info(obj: dict, ip: str, port: int, timeout: Optional[float]):
    """Query a single server."""
    config: BrowserConfig = obj["config"]

    try:
        info = get_server_info_with_timeout(ip, port, timeout or config.server_timeout, config)
    except (BrowserError, OSError) as e:
        output_error("info", f"Failed to query {ip}:{port}: {e}")

    output(
        JsonReporter().generate_flow_output("info", info.to_dict(), str(info)),
        obj["pretty"],
    )


@main.command("masters")
@click.option("--timeout", type=float, help="Budget per master server query in seconds.")
@click.pass_obj
def masters(obj: dict, timeout: Optional[float]):
    """Show how many servers each master server knows of."""
    config: BrowserConfig = obj["config"]
    timeout = timeout or config.master_timeout

    data = []
    for master in master_server_addresses(config.master_servers):
        entry = {"address": master, "count": None, "error": None}
        try:
            entry["count"] = get_server_count(resolve_master_server(master), timeout, config)
        except (BrowserError, OSError, ValueError) as e:
            entry["error"] = str(e)
        data.append(entry)

    reachable = sum(1 for entry in data if entry["error"] is None)
    output(
        JsonReporter().generate_flow_output(
            "masters", data, f"{reachable} of {len(data)} master servers reachable",
            success=reachable > 0,
        ),
        obj["pretty"],
    )

    if not reachable:
        sys.exit(1)


if __name__ == "__main__":
    main()
