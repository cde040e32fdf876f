import logging

import click

from .utils import db_url_option, group_options

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("cli").getChild("positions")

# isort: skip_file
# pylint: disable=import-outside-toplevel


@click.group("positions", short_help="Inspect stored liquidity positions")
def positions_group():
    """
    Query the liquidity positions saved in the ledger database
    """


@positions_group.command(name="list")
@group_options(db_url_option)
@click.option("--pool-id", "pool_id", type=int, default=None, help="Only list positions in this pool")
def list_command(db_url: str, pool_id: int | None):
    """List stored positions"""
    from rich.table import Table

    from amm_positions.cli.utils import cli_logger_config, create_cli_session
    from amm_positions.database.persistence import get_positions

    console = cli_logger_config(root_logger)
    db_session = create_cli_session(db_url)

    records = get_positions(db_session, pool_id)
    if not records:
        console.print("[yellow]No positions stored")
        return

    position_table = Table(title="Liquidity Positions", min_width=80)
    position_table.add_column("Token ID", justify="right")
    position_table.add_column("Pool")
    position_table.add_column("Range")
    position_table.add_column("Liquidity", justify="right")
    position_table.add_column("Owed 0", justify="right")
    position_table.add_column("Owed 1", justify="right")

    for record in records:
        position_table.add_row(
            str(record.token_id),
            str(record.pool_id),
            f"[{record.tick_lower}, {record.tick_upper}]",
            f"{record.liquidity:,}",
            f"{record.tokens_owed_0:,}",
            f"{record.tokens_owed_1:,}",
        )
    console.print(position_table)


@positions_group.command()
@group_options(db_url_option)
@click.argument("token_id", type=int)
def show(db_url: str, token_id: int):
    """Show every stored field of a single position"""
    from rich.table import Table

    from amm_positions.cli.utils import cli_logger_config, create_cli_session
    from amm_positions.database.persistence import get_position

    console = cli_logger_config(root_logger)
    db_session = create_cli_session(db_url)

    record = get_position(db_session, token_id)
    if record is None:
        logger.error(f"Position {token_id} does not exist")
        raise SystemExit(1)

    position_table = Table(title=f"Position {token_id}", show_header=False, min_width=80)
    position_table.add_column("Field")
    position_table.add_column("Value")
    for field in (
        "nonce",
        "pool_id",
        "tick_lower",
        "tick_upper",
        "liquidity",
        "fee_growth_inside_0_last",
        "fee_growth_inside_1_last",
        "tokens_owed_0",
        "tokens_owed_1",
    ):
        position_table.add_row(f"[cyan]{field}", str(getattr(record, field)))
    console.print(position_table)
