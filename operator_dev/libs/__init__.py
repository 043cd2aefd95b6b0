"""
operator-dev Library

Core utilities, override workflow and command-line application.
"""

# Core libraries
from .core import ClusterAuth, ConfigManager
from .core.exceptions import OperatorDevError, AuthenticationError, ConfigurationError, ValidationError

# Override libraries
from .override import OverrideService, OverrideRequest, OverrideEditor, WorkloadPatcher

# Main application
from .main_app import OperatorDevManager, main

__all__ = [
    # Core
    'ClusterAuth',
    'ConfigManager',
    'OperatorDevError',
    'AuthenticationError',
    'ConfigurationError',
    'ValidationError',
    # Override
    'OverrideService',
    'OverrideRequest',
    'OverrideEditor',
    'WorkloadPatcher',
    # Main
    'OperatorDevManager',
    'main'
]
