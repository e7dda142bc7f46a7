from tzlocal import get_localzone_name

from .config import get_testing_mode
from .logger import setup_logger

logger = setup_logger('utils', testing=get_testing_mode())


def get_local_timezone():
    """Best-effort IANA name of the host timezone, UTC when it cannot be determined"""
    try:
        return get_localzone_name() or 'UTC'
    except (LookupError, ValueError, OSError) as e:
        logger.warning(f"Could not determine local timezone: {e}")
        return 'UTC'
