"""
Exceptions Module

Exception hierarchy for the operator-dev tool.
"""


class OperatorDevError(Exception):
    """Base exception for all operator-dev errors"""


class ValidationError(OperatorDevError):
    """Raised when command-line input is missing or contradictory"""


class ConfigurationError(OperatorDevError):
    """Raised when a configuration file cannot be loaded or is invalid"""


class AuthenticationError(OperatorDevError):
    """Raised when the cluster connection cannot be configured"""


class ClusterAPIError(OperatorDevError):
    """Raised when a Kubernetes API call fails for a reason other than not-found"""


class ComponentNotFoundError(OperatorDevError):
    """Raised when the named cluster operator does not exist"""


class WorkloadNotFoundError(OperatorDevError):
    """Raised when the operator deployment cannot be located"""

    def __init__(self, message: str, namespace: str = None, name: str = None, candidates: int = 0):
        super().__init__(message)
        self.namespace = namespace
        self.name = name
        self.candidates = candidates


class OperandImageNotFoundError(OperatorDevError):
    """
    Raised when an operand image was requested but no container carries the
    operand image env var.

    Image changes requested in the same call have already been written when
    this is raised.
    """

    def __init__(self, message: str, namespace: str = None, name: str = None):
        super().__init__(message)
        self.namespace = namespace
        self.name = name
