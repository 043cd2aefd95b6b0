"""
Core Libraries

Shared functionality and utilities for the operator-dev tool.
"""

from .auth import ClusterAuth
from .config import ConfigManager
from .exceptions import (
    OperatorDevError, ValidationError, ConfigurationError, AuthenticationError, ClusterAPIError,
    ComponentNotFoundError, WorkloadNotFoundError, OperandImageNotFoundError
)
from .utils import setup_logging, disable_ssl_warnings, handle_api_error

__all__ = [
    'ClusterAuth',
    'ConfigManager',
    'OperatorDevError',
    'ValidationError',
    'ConfigurationError',
    'AuthenticationError',
    'ClusterAPIError',
    'ComponentNotFoundError',
    'WorkloadNotFoundError',
    'OperandImageNotFoundError',
    'setup_logging',
    'disable_ssl_warnings',
    'handle_api_error'
]
