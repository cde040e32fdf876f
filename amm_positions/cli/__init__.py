import click
from sqlalchemy import create_engine

from amm_positions.cli.liquidity import liquidity_group
from amm_positions.cli.pools import pools_group
from amm_positions.cli.positions import positions_group
from amm_positions.cli.utils import db_url_option, group_options
from amm_positions.database.migrations import migrate_up


@click.group()
def positions_cli():
    """Command Line Interface for the AMM Position Ledger"""


@positions_cli.command(name="migrate-up")
@group_options(db_url_option)
def cli_migrate_up(db_url):
    """
    Create the ledger tables
    """
    if db_url is None:
        raise click.UsageError(
            "Database URL not specified... Set with '--db-url' option or 'DB_URL' environment variable"
        )

    db_engine = create_engine(db_url)
    click.echo("Starting Database Migrations")

    migrate_up(db_engine)

    click.echo("Database Migration Complete")


# Adding Command Groups
positions_cli.add_command(positions_group, name="positions")
positions_cli.add_command(pools_group, name="pools")
positions_cli.add_command(liquidity_group, name="liquidity")
