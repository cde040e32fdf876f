import logging
import os
from logging import Logger

import click
from rich.console import Console
from rich.logging import RichHandler
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from amm_positions.addresses import UNISWAP_V3_FACTORY

root_logger = logging.getLogger("amm_positions")
logger = root_logger.getChild("cli")


def cli_logger_config(instrument_logger: Logger) -> Console:
    rich_console = Console()
    instrument_logger.handlers.clear()

    instrument_logger.addHandler(RichHandler(show_path=False, console=rich_console))
    instrument_logger.setLevel(logging.INFO)
    return rich_console


def group_options(*options):
    """Decorator to group multiple click options together"""

    def wrapper(function):
        for option in reversed(options):
            function = option(function)
        return function

    return wrapper


def create_cli_session(db_url: str) -> Session:
    """Creates a new database session"""

    if db_url is None:
        logger.error("Database URL not specified... Set with '--db-url' option or 'DB_URL' environment variable")
        raise SystemExit(1)

    engine = create_engine(db_url)
    return sessionmaker(bind=engine)()


# -------------------------------------------------------
#    CLI Secrets, Connections, and Configurations
# -------------------------------------------------------
db_url_option = click.option(
    "--db-url",
    "-db",
    "db_url",
    default=os.environ.get("DB_URL"),
    help="SQLAlchemy DB URL of the ledger database.  If not provided, will use the DB_URL environment variable",
)
factory_option = click.option(
    "--factory",
    "factory",
    default=UNISWAP_V3_FACTORY,
    show_default=True,
    help="Factory address used to derive pool addresses",
)


# -------------------------------------------------------
#    Liquidity Parameters
# -------------------------------------------------------
tick_lower_option = click.option(
    "--tick-lower",
    "tick_lower",
    type=int,
    required=True,
    help="Lower tick of the position range",
)
tick_upper_option = click.option(
    "--tick-upper",
    "tick_upper",
    type=int,
    required=True,
    help="Upper tick of the position range",
)
amount_0_option = click.option(
    "--amount-0",
    "amount_0",
    type=int,
    default=0,
    show_default=True,
    help="Desired amount of token 0, in the token's smallest unit",
)
amount_1_option = click.option(
    "--amount-1",
    "amount_1",
    type=int,
    default=0,
    show_default=True,
    help="Desired amount of token 1, in the token's smallest unit",
)
sqrt_price_option = click.option(
    "--sqrt-price",
    "sqrt_price",
    type=int,
    default=None,
    help="Current sqrt price of the pool as a Q64.96 fixed point number",
)
tick_option = click.option(
    "--tick",
    "tick",
    type=int,
    default=None,
    help="Current tick of the pool.  Converted to the sqrt price at the tick",
)
