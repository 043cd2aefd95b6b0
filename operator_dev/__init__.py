"""
operator-dev

Developer tooling for OpenShift cluster operators. Takes an operator out of
cluster version operator management and runs a custom build of it, or hands
control back.
"""

__version__ = "1.0.0"

from .libs import OperatorDevManager, main

__all__ = [
    'OperatorDevManager',
    'main'
]
