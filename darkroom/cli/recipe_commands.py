"""
Recipe commands: create and inspect adjustment parameter files
"""

import click
import logging
from pathlib import Path

from ..core.result import ProcessingError
from ..processing.params import AdjustmentParams

logger = logging.getLogger(__name__)


@click.group()
def recipe():
    """Adjustment recipe commands"""
    pass


@recipe.command()
@click.argument('path', type=click.Path(dir_okay=False, path_type=Path))
@click.option('--set', '-s', 'assignments', multiple=True, metavar='NAME=VALUE',
              help='Override a parameter, e.g. -s exposure=0.5')
@click.option('--force', is_flag=True, help='Overwrite an existing file')
def init(path: Path, assignments, force: bool):
    """Write a neutral recipe (plus any overrides) to PATH"""
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists (use --force to overwrite)")

    values = {}
    for assignment in assignments:
        name, sep, value = assignment.partition('=')
        if not sep:
            raise click.BadParameter(f"Expected NAME=VALUE, got {assignment!r}",
                                     param_hint='--set')
        values[name.strip()] = value.strip()

    try:
        params = AdjustmentParams.from_dict(values)
    except ProcessingError as e:
        raise click.ClickException(e.message)

    params.save(path)
    click.echo(f"✓ Recipe written to {path}")


@recipe.command()
@click.argument('path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option('--all', 'show_all', is_flag=True, help='Show neutral values too')
def show(path: Path, show_all: bool):
    """Print the adjustments stored in PATH"""
    try:
        params = AdjustmentParams.load(path)
    except ProcessingError as e:
        raise click.ClickException(e.message)

    values = params.to_dict() if show_all else params.non_default_fields()
    if not values:
        click.echo("Neutral recipe (no adjustments)")
        return

    click.echo(f"Recipe: {path.name}")
    click.echo("=" * 40)
    for name, value in values.items():
        click.echo(f"  {name:<24} {value:+g}")
