import sys
from pathlib import Path
from typing import Optional

import rich_click as click
from click.core import Context
from rich.markup import escape

from abigen.core import setup_logging

from .codegen import run_codegen
from .console import console


def excepthook(type, value, traceback):
    from rich.console import Console
    from rich.traceback import Traceback

    traceback_console = Console(stderr=True)
    traceback_console.print(
        Traceback.from_exception(
            type,
            value,
            traceback,
            suppress=[click],
        )
    )


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--debug",
    "-d",
    is_flag=True,
    default=False,
    help="Set logging level to debug.",
)
@click.option(
    "--silent",
    "-s",
    is_flag=True,
    default=False,
    help="Disable all stdout output.",
)
@click.option(
    "--config",
    required=False,
    type=click.Path(exists=False, dir_okay=False),
    envvar="ABIGEN_CONFIG",
    help="Path to the local config file.",
)
@click.version_option(message="%(version)s", package_name="abigen")
@click.pass_context
def main(ctx: Context, debug: bool, silent: bool, config: Optional[str]) -> None:
    setup_logging(console, debug)
    sys.excepthook = excepthook

    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["local_config_path"] = config

    if config is not None:
        try:
            Path(config).resolve().relative_to(Path.cwd())
        except ValueError:
            console.print(
                f"[red]Config path must be relative to current directory: {Path.cwd()}[/red]"
            )
            sys.exit(1)

    console.quiet = silent


main.add_command(run_codegen)


@main.command(name="config")
@click.pass_context
def config(ctx: Context) -> None:
    """Print loaded config options in JSON format."""
    from abigen.config import AbigenConfig, AbigenConfigError

    config = AbigenConfig(local_config_path=ctx.obj.get("local_config_path", None))
    try:
        config.load_configs()
    except AbigenConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)
    console.print_json(str(config))
