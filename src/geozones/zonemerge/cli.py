import click

from geozones.zonemerge import config
from geozones.zonemerge import zonemerge


@click.group(epilog="For detailed help on each command, run: zonemerge COMMAND --help")
def cli():
    """The zonemerge utility groups adjacent map zones and merges each
    group into a single polygon, keeping track of the original zones."""
    pass

@cli.command()
@click.option('-c', '--config', help='Path to configuration file to create or replace')
def init(config):
    """Populates a configuration file based on user input."""
    click.echo(zonemerge.banner())
    config = zonemerge.init_config(config)
    click.echo(f'Initialized the zonemerge configuration file {config}')

@cli.command()
@click.option('-c', '--config', 'config_filename', help='Path to configuration file to display', required=True)
def info(config_filename):
    """Summarizes the contents of a configuration file."""
    click.echo(zonemerge.banner())
    configuration = config.configuration(config.config_parser_factory(config_filename), {})
    configuration.show()

@cli.command()
@click.option('-c', '--config', 'config_filename', help='Path to configuration file', required=True)
@click.option('-t', '--tolerance', 'tolerance_meters', type=float, help='Adjacency tolerance in meters.', required=False, default=None)
@click.option('--index/--no-index', 'use_spatial_index', default=None, help='Force the spatial index on or off.')
def process(config_filename, tolerance_meters, use_spatial_index):
    """Merges the zones named in the configuration file."""
    click.echo(zonemerge.banner())
    overrides = {
        'tolerance_meters': tolerance_meters,
        'use_spatial_index': None if use_spatial_index is None else str(use_spatial_index),
    }
    try:
        configuration = config.configuration(config.config_parser_factory(config_filename), overrides)
        zonemerge.process(configuration)
    except Exception as e:
        click.echo("\nUnable to merge zones: " + str(e), err=True)
        exit(1)
    click.echo(f'Merged zones using the configuration file {config_filename}')

if __name__ == "__main__":
    cli()
