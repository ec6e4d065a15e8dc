from __future__ import annotations

import json
import shutil
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import rich_click as click
from click.core import Context
from rich.markup import escape

from abigen.core import get_logger

from .param_types import AbiSpec

if TYPE_CHECKING:
    from abigen.abi import AbiItem

logger = get_logger(__name__)


class CodegenError(Exception):
    """
    An ABI file cannot be read or does not contain a valid ABI.
    """


def load_abi(path: Path) -> List[AbiItem]:
    """
    Load and validate an ABI JSON file. Compilation artifacts holding the ABI under the `abi` key are accepted as well.
    """
    from abigen.abi import InvalidAbiError, parse_abi

    try:
        raw: Any = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise CodegenError(f"ABI file '{path}' does not exist.") from e
    except (OSError, UnicodeDecodeError) as e:
        raise CodegenError(f"Failed to read ABI file '{path}': {e}") from e
    except json.JSONDecodeError as e:
        raise CodegenError(f"ABI file '{path}' is not valid JSON: {e}") from e

    if isinstance(raw, dict) and "abi" in raw:
        raw = raw["abi"]

    try:
        return parse_abi(raw)
    except InvalidAbiError as e:
        raise CodegenError(
            f"ABI file '{path}' does not contain a valid ABI: {e}"
        ) from e


def generate_bindings(
    abis: Dict[str, Path], output_dir: Path, extension: str
) -> Dict[str, Optional[Path]]:
    """
    Generate one bindings file per ABI.

    Args:
        abis: Contract name to ABI file path mapping.
        output_dir: Directory the bindings are written to, created if missing.
        extension: File extension of the bindings, without the leading dot.

    Returns:
        Contract name to written file mapping, `None` for ABIs with nothing to generate.
    """
    from abigen.generator import generate

    written: Dict[str, Optional[Path]] = {}
    output_dir.mkdir(parents=True, exist_ok=True)

    for contract_name, abi_path in abis.items():
        abi = load_abi(abi_path)
        code = generate(abi, contract_name)
        if not code:
            logger.info(f"ABI of `{contract_name}` has no functions or events")
            written[contract_name] = None
            continue

        target = output_dir / f"{contract_name}.{extension}"
        target.write_text(code, encoding="utf-8")
        written[contract_name] = target
    return written


@click.command(name="codegen")
@click.option(
    "--abi",
    "abis",
    multiple=True,
    type=AbiSpec(),
    help="Contract name and ABI file in NAME=PATH format, added to the ABIs from the config.",
)
@click.option(
    "--output-dir",
    "-o",
    type=click.Path(file_okay=False),
    help="Directory to write the bindings to, overrides the config.",
    envvar="ABIGEN_CODEGEN_OUTPUT_DIR",
    show_envvar=True,
)
@click.option(
    "--extension",
    type=str,
    help="File extension of the bindings, overrides the config.",
)
@click.option(
    "--clean",
    is_flag=True,
    default=False,
    help="Delete the output directory before generating.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    default=False,
    help="Do not ask for confirmation when deleting the output directory.",
)
@click.pass_context
def run_codegen(
    ctx: Context,
    abis: Tuple[Tuple[str, Path], ...],
    output_dir: Optional[str],
    extension: Optional[str],
    clean: bool,
    yes: bool,
) -> None:
    """Generate AssemblyScript bindings from contract ABIs."""
    from abigen.config import AbigenConfig, AbigenConfigError

    from .console import console

    try:
        config = AbigenConfig(local_config_path=ctx.obj.get("local_config_path", None))
        config.load_configs()
    except AbigenConfigError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    all_abis = config.abis
    for contract_name, abi_path in abis:
        all_abis[contract_name] = abi_path.resolve()

    if len(all_abis) == 0:
        console.print(
            "[yellow]No ABIs to generate bindings for. Pass --abi or add them to the `abis` config section.[/yellow]"
        )
        return

    if output_dir is not None:
        target_dir = Path(output_dir).resolve()
    else:
        target_dir = config.codegen.output_dir
    if extension is not None:
        extension = extension.lstrip(".")
    if not extension:
        extension = config.codegen.extension

    if clean and target_dir.exists():
        if yes or click.confirm(f"Delete '{target_dir}' and all its contents?"):
            shutil.rmtree(target_dir)
        else:
            console.print("[yellow]Aborted.[/yellow]")
            sys.exit(1)

    try:
        written = generate_bindings(all_abis, target_dir, extension)
    except CodegenError as e:
        console.print(f"[red]{escape(str(e))}[/red]")
        sys.exit(1)

    for contract_name, path in written.items():
        if path is None:
            console.print(
                f"[yellow]Skipped {contract_name}: no functions or events in ABI[/yellow]"
            )
        else:
            console.print(f"[green]Generated {contract_name} -> {path}[/green]")
