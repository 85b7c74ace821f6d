import logging
import sys
from typing import Optional

import rich_click as click
from click.core import Context
from rich.logging import RichHandler

from .check import run_check
from .console import console
from .methods import run_methods
from .validate import run_validate


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
    "--config",
    required=False,
    type=click.Path(exists=False, dir_okay=False),
    envvar="LSP_CONTRACT_CONFIG",
    help="Path to the local config file.",
)
@click.version_option(message="%(version)s", package_name="lsp-contract")
@click.pass_context
def main(ctx: Context, debug: bool, config: Optional[str]) -> None:
    from lsp_contract.config import ContractConfig
    from lsp_contract.core.logging import set_debug

    logging.basicConfig(
        format="%(asctime)s %(name)s: %(message)s",
        handlers=[RichHandler(show_time=False, console=console, markup=True)],
        force=True,  # pyright: ignore reportGeneralTypeIssues
    )
    sys.excepthook = excepthook

    if not debug:
        contract_config = ContractConfig(local_config_path=config)
        contract_config.load_configs()
        debug = contract_config.logging.debug
    set_debug(debug)

    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["local_config_path"] = config


main.add_command(run_check)
main.add_command(run_methods)
main.add_command(run_validate)


@main.command(name="config")
@click.pass_context
def config(ctx: Context) -> None:
    """Print loaded config options in JSON format."""
    from lsp_contract.config import ContractConfig

    config = ContractConfig(local_config_path=ctx.obj.get("local_config_path", None))
    config.load_configs()
    console.print_json(str(config))


if __name__ == "__main__":
    main()
