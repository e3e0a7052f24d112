from __future__ import annotations

import json
import logging
from dataclasses import asdict
from typing import Any, Optional

import click
from tabulate import tabulate

from conflib.bootstrap import Runtime, initialize
from conflib.config import ConfigError, resolve_config_path
from conflib.defaults import SECRET_LENGTH, rand_string
from conflib.errors import format_config_error, suggest_troubleshooting_steps
from conflib.fs import BindPathFs
from conflib.log import configure_logging


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    help="Config file; defaults to $CONFCTL_CONFIG or ./conf.ini",
)
@click.option(
    "--json-output",
    "json_output",
    is_flag=True,
    help="Output JSON instead of tables (pretty-printed)",
)
@click.option(
    "-v",
    "--verbose",
    is_flag=True,
    help="Enable verbose logging to stderr (what the CLI is doing)",
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], json_output: bool, verbose: bool) -> None:
    """Configuration loader CLI.

    Reads the INI configuration (creating a default one with fresh secrets
    when it does not exist yet), validates every section and reports the
    result. JSON output is always pretty-printed.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["json"] = json_output
    ctx.obj["verbose"] = verbose

    configure_logging(logging.DEBUG if verbose else logging.WARNING)


def _load_runtime(ctx: click.Context) -> Runtime:
    log = logging.getLogger("confctl.load")
    try:
        path = resolve_config_path(ctx.obj.get("config_path"))
        log.info("Loading config from %s", path)
        return initialize(path)
    except ConfigError as e:
        click.echo(format_config_error(e), err=True)
        if ctx.obj.get("verbose"):
            click.echo("\nTroubleshooting suggestions:", err=True)
            for suggestion in suggest_troubleshooting_steps(e):
                click.echo(f"  • {suggestion}", err=True)
        raise SystemExit(2)


def _render(value: Any) -> str:
    if isinstance(value, tuple):
        return ",".join(value) if value else "—"
    if value == "":
        return "—"
    return str(value)


@cli.command("init")
@click.pass_context
def init_cmd(ctx: click.Context) -> None:
    """Create the config file if needed and check that it loads."""
    runtime = _load_runtime(ctx)
    path = runtime.config.source_path
    if ctx.obj.get("json"):
        click.echo(json.dumps({"config": str(path), "ok": True}, indent=2, sort_keys=True))
        return
    click.echo(f"Configuration ready: {path}")


@cli.command("show")
@click.option("--section", "section_name", help="Only show this section (e.g. System)")
@click.pass_context
def show(ctx: click.Context, section_name: Optional[str]) -> None:
    """Show the loaded configuration, section by section."""
    log = logging.getLogger("confctl.show")
    runtime = _load_runtime(ctx)
    sections = runtime.config.sections()

    if section_name:
        if section_name not in sections:
            click.echo(f"Unknown section: {section_name}", err=True)
            raise SystemExit(2)
        sections = {section_name: sections[section_name]}

    if ctx.obj.get("json"):
        if section_name:
            click.echo(json.dumps(asdict(sections[section_name]), indent=2, sort_keys=True))
        else:
            click.echo(runtime.config.to_json())
        return

    blocks = []
    for name, record in sections.items():
        rows = [[spec.key, _render(getattr(record, spec.name))] for spec in record.FIELDS]
        blocks.append(f"[{name}]\n" + tabulate(rows, headers=["FIELD", "VALUE"]))
    log.info("Rendering %d sections", len(blocks))
    click.echo("\n\n".join(blocks))


@cli.command("binds")
@click.pass_context
def binds(ctx: click.Context) -> None:
    """List the installed remote bind points."""
    runtime = _load_runtime(ctx)
    fs = runtime.fs
    if not isinstance(fs, BindPathFs):
        if ctx.obj.get("json"):
            click.echo(json.dumps({"binds": []}, indent=2, sort_keys=True))
        else:
            click.echo("No remote binds configured")
        return

    rows = [[mount, fs.points[mount].kind, fs.points[mount].locate("")] for mount in sorted(fs.points)]
    if ctx.obj.get("json"):
        out = {"binds": [{"mount": r[0], "backend": r[1], "target": r[2]} for r in rows]}
        click.echo(json.dumps(out, indent=2, sort_keys=True))
        return
    click.echo(tabulate(rows, headers=["MOUNT", "BACKEND", "TARGET"]))


@cli.command("locate")
@click.argument("path")
@click.pass_context
def locate(ctx: click.Context, path: str) -> None:
    """Show where PATH resolves through the configured filesystem."""
    runtime = _load_runtime(ctx)
    click.echo(runtime.fs.locate(path))


@cli.command("secret")
@click.option("--length", default=SECRET_LENGTH, show_default=True, type=click.IntRange(min=1))
def secret(length: int) -> None:
    """Print a fresh random secret (e.g. for SessionSecret or Slave.Secret)."""
    click.echo(rand_string(length))


def main() -> None:  # entry point
    cli(standalone_mode=True)


if __name__ == "__main__":  # pragma: no cover
    main()
