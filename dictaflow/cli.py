"""CLI entry point for dictaflow."""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Optional

import click

from dictaflow import __version__
from dictaflow.config.settings import EngineConfig, load_config
from dictaflow.utils.logging import configure_logging, get_logger
from dictaflow.utils.result import ExitCode

# Default paths
DEFAULT_CONFIG = "./config"


class Context:
    """CLI context for sharing state between commands."""

    def __init__(self, config: EngineConfig) -> None:
        self.config = config
        self.logger = get_logger("cli")


pass_context = click.make_pass_decorator(Context)


def output_json(data) -> None:
    """Output JSON to stdout."""
    click.echo(json.dumps(data, indent=2, default=str))


@click.group()
@click.option(
    "--config",
    type=click.Path(exists=False, path_type=Path),
    default=DEFAULT_CONFIG,
    help="Path to config directory",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warn", "error"], case_sensitive=False),
    default=None,
    help="Logging level (overrides config)",
)
@click.option(
    "--log-format",
    type=click.Choice(["json", "text"], case_sensitive=False),
    default=None,
    help="Log format (overrides config)",
)
@click.version_option(version=__version__)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Path,
    log_level: Optional[str],
    log_format: Optional[str],
) -> None:
    """
    dictaflow - dictation workflow state machine.

    Drives the record, transcribe, format and clipboard pipeline headlessly
    and inspects its transition table.
    """
    result = load_config(config)
    if result.is_err():
        configure_logging(level=log_level or "info", format_type=log_format or "json")
        output_json({
            "status": "error",
            "message": str(result.unwrap_err()),
        })
        ctx.exit(ExitCode.CONFIG_INVALID)

    engine_config = result.unwrap()
    configure_logging(
        level=log_level or engine_config.logging.level,
        format_type=log_format or engine_config.logging.format,
    )

    ctx.obj = Context(config=engine_config)


@cli.command()
@click.argument("script", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--keep-going",
    is_flag=True,
    default=False,
    help="Continue past rejected events",
)
@click.option(
    "--quiet",
    is_flag=True,
    default=False,
    help="Only print the final summary",
)
@pass_context
def replay(ctx: Context, script: Path, keep_going: bool, quiet: bool) -> None:
    """Feed a YAML event script through a fresh state machine."""
    from dictaflow.fsm.machine import build_machine
    from dictaflow.fsm.notifier import StreamSink
    from dictaflow.fsm.replay import load_script, replay as run_replay

    ctx.logger.info("replay_requested", script=str(script), keep_going=keep_going)

    parsed = load_script(script)
    if parsed.is_err():
        ctx.logger.error("script_invalid", error=str(parsed.unwrap_err()))
        output_json({
            "status": "error",
            "message": str(parsed.unwrap_err()),
        })
        sys.exit(ExitCode.SCRIPT_INVALID)

    sink = None if quiet else StreamSink(sys.stdout)
    machine = build_machine(ctx.config, sink=sink)

    report = run_replay(machine, parsed.unwrap(), keep_going=keep_going)

    output_json({
        "status": "success" if report.success else "rejected",
        "final_state": machine.current_state_repr(),
        "views": machine.view_flags().to_dict(),
        "stats": machine.stats.to_dict(),
        **report.to_dict(),
    })

    if not report.success and not keep_going:
        sys.exit(ExitCode.TRANSITION_REJECTED)


@cli.command(name="events")
def list_events() -> None:
    """List event names and their fields."""
    from dictaflow.fsm.events import ALL_EVENT_TYPES, event_fields

    output_json({
        event_type.__name__: event_fields(event_type)
        for event_type in ALL_EVENT_TYPES
    })


@cli.command()
@click.option(
    "--state",
    "state_name",
    default=None,
    help="Only show events accepted by this state",
)
def table(state_name: Optional[str]) -> None:
    """Print the transition table."""
    from dictaflow.fsm.states import ALL_STATE_TYPES
    from dictaflow.fsm.transitions import allowed_events, rules

    if state_name is None:
        output_json([
            {"state": state, "event": event, "rule": rule}
            for state, event, rule in rules()
        ])
        return

    by_name = {cls.__name__: cls for cls in ALL_STATE_TYPES}
    if state_name not in by_name:
        output_json({
            "status": "error",
            "message": f"Unknown state: {state_name}",
            "states": sorted(by_name),
        })
        sys.exit(ExitCode.GENERAL_ERROR)

    output_json({
        "state": state_name,
        "events": [cls.__name__ for cls in allowed_events(by_name[state_name])],
    })


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except Exception as e:
        logger = get_logger("cli")
        logger.error("cli_error", error=str(e))
        sys.exit(2)


if __name__ == "__main__":
    main()
