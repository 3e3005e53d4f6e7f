import configparser
import dataclasses
import os.path
from typing import Optional

from geozones.zonemerge import constants
from geozones.zonemerge.models import MergeOptions


@dataclasses.dataclass
class Config:
    zones_file: str
    id_property: str
    name_property: str
    tolerance_meters: float
    use_spatial_index: str
    grid_size: int
    simplify: bool
    simplify_tolerance: float
    preserve_properties: bool
    log_file: str

    def show(self):
        print()
        print('Using configuration:')
        for k,v in self.__dict__.items():
            print(f'  + {k}: {v}')

    def spatial_index_setting(self) -> Optional[bool]:
        """
        Maps the use_spatial_index text setting onto MergeOptions' tri-state.
        """
        setting = str(self.use_spatial_index).strip().lower()
        if setting in ('', 'auto'):
            return None
        return setting in ('true', 'yes', 'on', '1')

    def merge_options(self) -> MergeOptions:
        return MergeOptions(
            tolerance_meters=self.tolerance_meters,
            use_spatial_index=self.spatial_index_setting(),
            grid_size=self.grid_size or None,
            simplify=self.simplify,
            simplify_tolerance=self.simplify_tolerance,
            preserve_properties=self.preserve_properties,
        )

def config_parser_factory(configuration_file):
    """
    Returns a ConfigParser by reading the specified file.
    """
    if configuration_file is None or not os.path.exists(configuration_file):
        raise ValueError(f'Unable to find configuration file {configuration_file}')
    cfg_parser = configparser.ConfigParser(interpolation=configparser.ExtendedInterpolation())
    cfg_parser.read(configuration_file)
    return cfg_parser


def _get_configuration_value(section, name, value_type, config_parser, overrides):
    """
    Returns a value from the provided config parser; any value for the key that
    is provided in the 'overrides' dictionary will take precedence.
    """
    if overrides.get(name) is None:
        if value_type is bool:
            return config_parser.getboolean(section, name)
        elif value_type is int:
            return config_parser.getint(section, name)
        elif value_type is float:
            return config_parser.getfloat(section, name)
        else:
            return config_parser.get(section, name)
    else:
        return overrides.get(name)

def configuration(config_parser, overrides):
    """
    Returns a Config object that is populated from the provided config
    parser, with values overriden with anything provided in 'overrides'.
    """
    config_parser['DEFAULT'] = {
        'id_property': constants.DEFAULT_ID_PROPERTY,
        'name_property': constants.DEFAULT_NAME_PROPERTY,
        'tolerance_meters': constants.DEFAULT_TOLERANCE_METERS,
        'use_spatial_index': constants.DEFAULT_USE_SPATIAL_INDEX,
        'grid_size': constants.DEFAULT_GRID_SIZE,
        'simplify': constants.DEFAULT_SIMPLIFY,
        'simplify_tolerance': constants.DEFAULT_SIMPLIFY_TOLERANCE,
        'preserve_properties': constants.DEFAULT_PRESERVE_PROPERTIES,
        'log_file': constants.DEFAULT_LOG_FILE,
    }
    for section in (constants.SOURCE_SECTION_NAME,
                    constants.MERGE_SECTION_NAME,
                    constants.SETTINGS_SECTION_NAME):
        if not config_parser.has_section(section):
            config_parser.add_section(section)

    source = constants.SOURCE_SECTION_NAME
    merge = constants.MERGE_SECTION_NAME
    settings = constants.SETTINGS_SECTION_NAME
    try:
        return Config(
            _get_configuration_value(source, 'zones_file', str, config_parser, overrides),
            _get_configuration_value(source, 'id_property', str, config_parser, overrides),
            _get_configuration_value(source, 'name_property', str, config_parser, overrides),
            _get_configuration_value(merge, 'tolerance_meters', float, config_parser, overrides),
            _get_configuration_value(merge, 'use_spatial_index', str, config_parser, overrides),
            _get_configuration_value(merge, 'grid_size', int, config_parser, overrides),
            _get_configuration_value(merge, 'simplify', bool, config_parser, overrides),
            _get_configuration_value(merge, 'simplify_tolerance', float, config_parser, overrides),
            _get_configuration_value(merge, 'preserve_properties', bool, config_parser, overrides),
            _get_configuration_value(settings, 'log_file', str, config_parser, overrides),
        )
    except (configparser.Error, ValueError) as e:
        raise ValueError(f'Unable to read the configuration file: {e}') from e

def validate(configuration):
    """
    Validates each value in the configuration.
    """
    validations = [
        ['zones_file', lambda path: os.path.exists(path), 'The zones_file does not exist.'],
        ['tolerance_meters', lambda meters: meters >= 0, 'The tolerance_meters must not be negative.'],
        ['grid_size', lambda size: size >= 0, 'The grid_size must not be negative.'],
        ['simplify_tolerance', lambda tolerance: tolerance > 0, 'The simplify_tolerance must be positive.'],
        ['use_spatial_index',
         lambda setting: str(setting).strip().lower() in ('', 'auto', 'true', 'false', 'yes', 'no', 'on', 'off', '1', '0'),
         'The use_spatial_index must be auto, true or false.'],
    ]
    errors = [msg for name, fn, msg in validations if not fn(getattr(configuration, name))]
    return len(errors) == 0, errors
