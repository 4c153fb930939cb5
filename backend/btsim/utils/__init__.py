"""
BTSim Utilities Package
=======================

Common utilities, constants, and helper functions used throughout the application.
"""

from btsim.utils.constants import (
    APP_NAME,
    APP_FULL_NAME,
    APP_VERSION,
    APP_DESCRIPTION,
    DEFAULT_DETECTION_THRESHOLD,
    RISK_WEIGHTS,
)

from btsim.utils.exceptions import (
    BTSimBaseException,
    ValidationError,
    DetectionError,
    ModelUnavailableError,
    SimulationError,
    UnauthorizedOperatorError,
    StorageError,
    ConfigurationError,
)

from btsim.utils.helpers import (
    generate_id,
    now_ms,
    local_datetime,
    clamp,
    parse_url,
    extract_host,
    is_ip_address,
    domain_matches,
    truncate_string,
)

__all__ = [
    'APP_NAME',
    'APP_FULL_NAME',
    'APP_VERSION',
    'APP_DESCRIPTION',
    'DEFAULT_DETECTION_THRESHOLD',
    'RISK_WEIGHTS',
    'BTSimBaseException',
    'ValidationError',
    'DetectionError',
    'ModelUnavailableError',
    'SimulationError',
    'UnauthorizedOperatorError',
    'StorageError',
    'ConfigurationError',
    'generate_id',
    'now_ms',
    'local_datetime',
    'clamp',
    'parse_url',
    'extract_host',
    'is_ip_address',
    'domain_matches',
    'truncate_string',
]
