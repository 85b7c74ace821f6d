import sys
from typing import Optional

import rich_click as click

from .catalog import catalog_option, resolve_registry
from .console import console


@click.command(name="check")
@catalog_option
@click.pass_context
def run_check(ctx: click.Context, catalog: Optional[str]) -> None:
    """Check that no payload of a catalog is ambiguous."""
    registry = resolve_registry(ctx, catalog)
    ambiguities = registry.find_ambiguities()

    if len(ambiguities) == 0:
        console.print(
            f"[green]No ambiguities found in {registry.name} catalog ({len(registry)} methods)[/green]"
        )
        return

    for ambiguity in ambiguities:
        console.print(str(ambiguity), style="red", markup=False, soft_wrap=True)
    sys.exit(1)
