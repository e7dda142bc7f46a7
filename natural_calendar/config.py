import os
import json

DEFAULT_CONFIG = {
    'testing_mode': False,
    'timezone': None,
    'locale': 'en-US',
    'reminder_kind': 'DISPLAY',
    'reject_invalid': False,
    'fuzzy_hours': {},
}


def get_data_dir():
    """Get the directory holding config.json and the debug log"""
    data_dir = os.getenv('NATURAL_CALENDAR_DATA')
    if not data_dir:
        data_dir = os.path.expanduser('~/.config/natural-calendar')
    return data_dir


def load_config():
    """Load config.json over the defaults; missing or broken files give the defaults"""
    config = dict(DEFAULT_CONFIG)
    config_file = os.path.join(get_data_dir(), 'config.json')
    try:
        with open(config_file, 'r') as f:
            loaded = json.load(f)
    except (OSError, ValueError):
        return config
    if isinstance(loaded, dict):
        config.update({k: v for k, v in loaded.items() if k in DEFAULT_CONFIG})
    return config


def get_testing_mode():
    """Check if testing mode is enabled"""
    return bool(load_config().get('testing_mode', False))
