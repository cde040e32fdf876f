import logging

import click

from .utils import db_url_option, factory_option, group_options

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("cli").getChild("pools")

# isort: skip_file
# pylint: disable=import-outside-toplevel


@click.group("pools", short_help="Pool registry utilities")
def pools_group():
    """
    Inspect the pool registry and derive pool addresses
    """


@pools_group.command(name="list")
@group_options(db_url_option)
def list_command(db_url: str):
    """List every registered pool handle"""
    from rich.table import Table

    from amm_positions.cli.utils import cli_logger_config, create_cli_session
    from amm_positions.database.persistence import get_pool_entries

    console = cli_logger_config(root_logger)
    db_session = create_cli_session(db_url)

    records = get_pool_entries(db_session)
    if not records:
        console.print("[yellow]No pools registered")
        return

    pool_table = Table(title="Pool Registry", min_width=80)
    pool_table.add_column("Pool ID", justify="right")
    pool_table.add_column("Pool Address")
    pool_table.add_column("Token 0")
    pool_table.add_column("Token 1")
    pool_table.add_column("Fee", justify="right")

    for record in records:
        pool_table.add_row(
            str(record.pool_id),
            record.pool_address,
            record.token_0,
            record.token_1,
            str(record.fee),
        )
    console.print(pool_table)


@pools_group.command()
@group_options(factory_option)
@click.argument("token_a")
@click.argument("token_b")
@click.argument("fee", type=int)
def address(factory: str, token_a: str, token_b: str, fee: int):
    """
    Derive the address of the pool for TOKEN_A, TOKEN_B and FEE.  Tokens may be given in either order
    """
    from amm_positions.pool_registry import compute_pool_address
    from amm_positions.types import PoolKey

    try:
        pool_key = PoolKey.from_tokens(token_a, token_b, fee)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc

    click.echo(compute_pool_address(factory, pool_key))
