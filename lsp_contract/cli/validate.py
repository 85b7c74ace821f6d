import json
import sys
from typing import Optional

import rich_click as click

from .catalog import catalog_option, resolve_registry
from .console import console


@click.command(name="validate")
@click.argument("method", type=str)
@click.argument(
    "file", type=click.Path(exists=True, dir_okay=False, readable=True)
)
@catalog_option
@click.option(
    "--result",
    "as_result",
    is_flag=True,
    default=False,
    help="Validate the file as a reply (result or error) instead of request parameters.",
)
@click.pass_context
def run_validate(
    ctx: click.Context,
    method: str,
    file: str,
    catalog: Optional[str],
    as_result: bool,
) -> None:
    """Validate a JSON payload against the shapes of a method."""
    from lsp_contract.exceptions import (
        MethodNotFoundError,
        ShapeError,
        WrongDirectionError,
    )

    registry = resolve_registry(ctx, catalog)

    with open(file, "r", encoding="utf-8") as f:
        try:
            wire = json.load(f)
        except json.JSONDecodeError as e:
            console.print(f"[red]Invalid JSON in {file}: {e}[/red]")
            sys.exit(2)

    try:
        if as_result:
            reply = registry.accept_result(method, wire)
            kind = "error" if reply.failed else "result"
        else:
            registry.decode_params(method, wire)
            kind = "params"
    except (MethodNotFoundError, WrongDirectionError) as e:
        console.print(str(e), style="red", markup=False, soft_wrap=True)
        sys.exit(2)
    except ShapeError as e:
        console.print(str(e), style="red", markup=False, soft_wrap=True)
        sys.exit(1)

    console.print(f"[green]Valid {method} {kind}[/green]")
