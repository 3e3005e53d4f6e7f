import configparser
import logging
import os.path
import sys

from funcy import decorator
from pyfiglet import Figlet
from rich.prompt import Confirm, Prompt

from geozones.zonemerge import config
from geozones.zonemerge import constants
from geozones.zonemerge import readers
from geozones.zonemerge.merge import merge_zones


CONSOLE_FORMAT = "%(message)s"
LOGFILE_FORMAT = "%(asctime)s|%(levelname)s|%(name)s|%(message)s"
LOGGER_NAME = "geozones"

def init_logging(configuration: config.Config):
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console_handler)

    logfile_handler = logging.FileHandler(configuration.log_file, "w")
    logfile_handler.setLevel(logging.DEBUG)
    logfile_handler.setFormatter(logging.Formatter(LOGFILE_FORMAT))
    logger.addHandler(logfile_handler)

@decorator
def log(call):
    logging.getLogger(LOGGER_NAME).info(call._func.__name__)
    return call()

def banner():
    """
    Displays the name of this utility using incredible ASCII-art.
    """
    f = Figlet(font='slant')
    return f.renderText('zonemerge')

def init_config(configuration_file):
    """
    Prompts the user for configuration values and then creates a valid configuration file.
    """
    print("""This utility will create a zone merge configuration file by prompting """
          """you for values for each of the configuration parameters.""")
    print()
    if not configuration_file:
        configuration_file = Prompt.ask("configuration file name", default="zonemerge.ini")
    else:
        print(f'Creating configuration file {configuration_file}')
        print()

    if (os.path.exists(configuration_file)):
        print(f'WARNING: The {configuration_file} already exists.')
        overwrite = Confirm.ask("Overwrite?")
        if not overwrite:
            print('Not overwriting existing file. Exiting.')
            exit(1)

    cfg_parser = configparser.ConfigParser()

    print()
    print(f'{constants.SOURCE_SECTION_NAME} Parameters')
    print('--------------------------------------------------')
    cfg_parser.add_section(constants.SOURCE_SECTION_NAME)
    cfg_parser.set(constants.SOURCE_SECTION_NAME, "zones_file", Prompt.ask("GeoJSON zones file", default="zones.geojson"))
    cfg_parser.set(constants.SOURCE_SECTION_NAME, "id_property", Prompt.ask("Zone id property", default=constants.DEFAULT_ID_PROPERTY))
    cfg_parser.set(constants.SOURCE_SECTION_NAME, "name_property", Prompt.ask("Zone name property", default=constants.DEFAULT_NAME_PROPERTY))

    print()
    print(f'{constants.MERGE_SECTION_NAME} Parameters')
    print('--------------------------------------------------')
    cfg_parser.add_section(constants.MERGE_SECTION_NAME)
    cfg_parser.set(constants.MERGE_SECTION_NAME, "tolerance_meters", Prompt.ask("Adjacency tolerance in meters", default=str(constants.DEFAULT_TOLERANCE_METERS)))
    cfg_parser.set(constants.MERGE_SECTION_NAME, "use_spatial_index", Prompt.ask("Use a spatial index? (auto/true/false)", default=constants.DEFAULT_USE_SPATIAL_INDEX))
    cfg_parser.set(constants.MERGE_SECTION_NAME, "grid_size", Prompt.ask("Spatial index cells per axis (0 for automatic)", default=str(constants.DEFAULT_GRID_SIZE)))
    cfg_parser.set(constants.MERGE_SECTION_NAME, "simplify", Prompt.ask("Simplify merged geometries? (True/False)", default=str(constants.DEFAULT_SIMPLIFY)))
    cfg_parser.set(constants.MERGE_SECTION_NAME, "simplify_tolerance", Prompt.ask("Simplification tolerance in degrees", default=str(constants.DEFAULT_SIMPLIFY_TOLERANCE)))
    cfg_parser.set(constants.MERGE_SECTION_NAME, "preserve_properties", Prompt.ask("Carry zone properties into merged features? (True/False)", default=str(constants.DEFAULT_PRESERVE_PROPERTIES)))

    print()
    print(f'{constants.SETTINGS_SECTION_NAME} Parameters')
    print('--------------------------------------------------')
    cfg_parser.add_section(constants.SETTINGS_SECTION_NAME)
    cfg_parser.set(constants.SETTINGS_SECTION_NAME, "log_file", Prompt.ask("Log file", default=constants.DEFAULT_LOG_FILE))

    print()
    print(f'Saving new configuration: {configuration_file}')
    with open(configuration_file, "tw") as file:
        cfg_parser.write(file)

    return configuration_file

def summarize(result):
    """
    Returns printable lines describing each merged group.
    """
    lines = []
    for number, feature in enumerate(result.features, start=1):
        lines.append(f'  {number}. {feature.geometry.__geo_interface__["type"]}: '
                     f'{", ".join(feature.merged_zone_names)}')
    lines.append('')
    lines.append(f'{result.metrics["total_zones"]} zones merged into '
                 f'{result.metrics["merged_groups"]} groups '
                 f'in {result.metrics["processing_time"]:.3f}s')
    if result.warnings:
        lines.append(f'{len(result.warnings)} warnings (see {LOGGER_NAME} log for details)')
    return lines

@log
def load(configuration: config.Config):
    return readers.load_zones(configuration.zones_file,
                              configuration.id_property,
                              configuration.name_property)

@log
def merge(configuration: config.Config, zones):
    return merge_zones(zones, configuration.merge_options())

def process(configuration: config.Config):
    """
    Loads the configured zones file, merges adjacent zones and prints a
    summary of the resulting groups.
    """
    valid, errors = config.validate(configuration)
    if not valid:
        raise ValueError(' '.join(errors))

    init_logging(configuration)
    result = merge(configuration, load(configuration))

    print()
    for line in summarize(result):
        print(line)

    return result
