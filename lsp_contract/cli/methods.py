from typing import Optional

import rich_click as click

from .catalog import catalog_option, resolve_registry
from .console import console


@click.command(name="methods")
@catalog_option
@click.option(
    "--direction",
    type=click.Choice(["request", "notification"], case_sensitive=False),
    default=None,
    help="Only list methods of the given direction.",
)
@click.pass_context
def run_methods(
    ctx: click.Context, catalog: Optional[str], direction: Optional[str]
) -> None:
    """List methods of a catalog together with their payload shapes."""
    from rich.table import Table

    registry = resolve_registry(ctx, catalog)

    table = Table(title=f"{registry.name} {registry.version}")
    table.add_column("Method", no_wrap=True)
    table.add_column("Direction")
    table.add_column("Params")
    table.add_column("Result")
    table.add_column("Error")

    for descriptor in registry:
        if direction is not None and descriptor.direction.value != direction.lower():
            continue
        table.add_row(
            descriptor.name,
            descriptor.direction.value,
            descriptor.params.describe(),
            descriptor.result.describe() if descriptor.result is not None else "",
            descriptor.error.describe() if descriptor.error is not None else "",
        )
    console.print(table)
