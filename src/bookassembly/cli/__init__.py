# ABOUTME: CLI package for Book Assembly, built on Click.
# ABOUTME: Defines the root command group and registers subcommands.

import logging

import click
from rich.logging import RichHandler

from bookassembly.cli.commands import (
    add_cmd,
    bin_cmd,
    dupes_cmd,
    genre_cmd,
    health_cmd,
    info_cmd,
    ls_cmd,
    rm_cmd,
    search_cmd,
    series_cmd,
    wishlist_cmd,
)


@click.group()
@click.version_option(package_name="bookassembly")
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
def cli(verbose: bool) -> None:
    """Book Assembly - catalogue, check, and tidy your personal library."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(show_path=False)],
            force=True,
        )


cli.add_command(add_cmd.add)
cli.add_command(ls_cmd.ls)
cli.add_command(info_cmd.info)
cli.add_command(rm_cmd.rm)
cli.add_command(bin_cmd.bin_group)
cli.add_command(health_cmd.health)
cli.add_command(dupes_cmd.dupes)
cli.add_command(series_cmd.series)
cli.add_command(genre_cmd.genre)
cli.add_command(wishlist_cmd.wishlist)
cli.add_command(search_cmd.search)
