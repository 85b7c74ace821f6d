from __future__ import annotations

from typing import TYPE_CHECKING, Optional

import rich_click as click

if TYPE_CHECKING:
    from lsp_contract.registry import MethodRegistry


catalog_option = click.option(
    "--catalog",
    "-c",
    type=click.Choice(["standard", "legacy"], case_sensitive=False),
    default=None,
    help="Method catalog to use. Defaults to the `catalog` config option.",
)


def resolve_registry(ctx: click.Context, catalog: Optional[str]) -> MethodRegistry:
    from lsp_contract.catalogs import get_registry
    from lsp_contract.config import ContractConfig

    if catalog is None:
        config = ContractConfig(local_config_path=ctx.obj.get("local_config_path", None))
        config.load_configs()
        catalog = config.catalog.value
    return get_registry(catalog.lower())
