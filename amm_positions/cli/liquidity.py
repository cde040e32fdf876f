import logging

import click

from .utils import (
    amount_0_option,
    amount_1_option,
    group_options,
    sqrt_price_option,
    tick_lower_option,
    tick_option,
    tick_upper_option,
)

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("cli").getChild("liquidity")

# isort: skip_file
# pylint: disable=too-many-arguments,import-outside-toplevel


@click.group("liquidity", short_help="Liquidity math utilities")
def liquidity_group():
    """
    Convert between token amounts and liquidity for a price range
    """


@liquidity_group.command()
@group_options(
    sqrt_price_option,
    tick_option,
    tick_lower_option,
    tick_upper_option,
    amount_0_option,
    amount_1_option,
)
def compute(
    sqrt_price: int | None,
    tick: int | None,
    tick_lower: int,
    tick_upper: int,
    amount_0: int,
    amount_1: int,
):
    """
    Compute the liquidity a deposit of --amount-0 and --amount-1 would mint into [--tick-lower, --tick-upper],
    and the token amounts that liquidity represents at the current price.
    """
    from rich.table import Table

    from amm_positions.cli.utils import cli_logger_config
    from amm_positions.exceptions import PositionManagerRevert
    from amm_positions.math import PositionMath
    from amm_positions.resolver import LiquidityResolver

    console = cli_logger_config(root_logger)

    if (sqrt_price is None) == (tick is None):
        raise click.UsageError("Specify exactly one of --sqrt-price or --tick")

    resolver = LiquidityResolver()
    try:
        if sqrt_price is None:
            sqrt_price = PositionMath.tick_math.get_sqrt_ratio_at_tick(tick)
        liquidity = resolver.liquidity_for_range(sqrt_price, tick_lower, tick_upper, amount_0, amount_1)
        used_0, used_1 = resolver.amounts_for_range(sqrt_price, tick_lower, tick_upper, liquidity)
    except PositionManagerRevert as exc:
        logger.error(f"{exc.__class__.__name__}: {exc}")
        raise SystemExit(1) from exc

    result_table = Table(title="Liquidity for Range", show_header=False, min_width=60)
    result_table.add_column("Key")
    result_table.add_column("Value", justify="right")
    result_table.add_row("[cyan]Sqrt Price", str(sqrt_price))
    result_table.add_row("[cyan]Range", f"[{tick_lower}, {tick_upper}]")
    result_table.add_row("[green]Liquidity", str(liquidity))
    result_table.add_row("Amount 0", str(used_0))
    result_table.add_row("Amount 1", str(used_1))
    console.print(result_table)
