"""
Constants Module

Centralized constants for the operator-dev tool to eliminate magic strings
and improve maintainability.
"""


class KubernetesConstants:
    """Kubernetes and OpenShift API constants"""

    from enum import Enum

    # API Group constants
    CONFIG_API_GROUP = "config.openshift.io"
    CONFIG_API_VERSION = "v1"

    # Singleton ClusterVersion object owned by the cluster version operator
    CLUSTER_VERSION_NAME = "version"

    # Override entry group/kind for operator deployments
    OVERRIDE_GROUP = "apps/v1"
    OVERRIDE_KIND = "Deployment"

    # Naming convention constants
    OPENSHIFT_PREFIX = "openshift-"
    OPERATOR_SUFFIX = "-operator"

    class ResourceName(str, Enum):
        """Kubernetes resource plurals used in API calls"""
        CLUSTER_OPERATORS = "clusteroperators"
        CLUSTER_VERSIONS = "clusterversions"

        def __str__(self) -> str:
            """Return the resource name for use in Kubernetes API calls"""
            return self.value


class WorkloadConstants:
    """Container environment sentinels and argument formats"""

    # Env var carrying the operator's own image
    OPERATOR_IMAGE_ENV = "OPERATOR_IMAGE"

    # Env var carrying the managed operand's image
    OPERAND_IMAGE_ENV = "IMAGE"

    VERBOSITY_ARG_FORMAT = "-v={level}"


class RetryConstants:
    """Conflict retry defaults, matching the client library's DefaultBackoff"""

    DEFAULT_STEPS = 4
    DEFAULT_DURATION = 0.01
    DEFAULT_FACTOR = 5.0
    DEFAULT_JITTER = 0.1
    DEFAULT_CAP = 5.0

    # Time given to the cluster version operator to observe a new override
    DEFAULT_SETTLE_DELAY = 1.0


class NetworkConstants:
    """Network-related constants"""

    from enum import IntEnum

    class HTTPStatus(IntEnum):
        """HTTP status codes returned by the Kubernetes API"""
        UNAUTHORIZED = 401
        FORBIDDEN = 403
        NOT_FOUND = 404
        CONFLICT = 409

        def __str__(self) -> str:
            """Return a human-readable description of the status code"""
            descriptions = {
                401: "Unauthorized",
                403: "Forbidden",
                404: "Not Found",
                409: "Conflict"
            }
            return f"{self.value} {descriptions.get(self.value, 'Unknown')}"


class ErrorMessages:
    """Centralized error message templates"""

    from enum import Enum

    class SSLError(str, Enum):
        """SSL-related error message templates"""
        CERT_VERIFICATION_FAILED = (
            "SSL certificate verification failed. The OpenShift cluster is using self-signed certificates.\n"
            "To resolve this issue, add the --insecure-skip-tls-verify flag to your command.\n"
            "Example: operator-dev override kube-apiserver --image=IMAGE --insecure-skip-tls-verify"
        )

        CONNECTION_ERROR = (
            "SSL connection error occurred. If using self-signed certificates, add --insecure-skip-tls-verify.\n"
            "Original error: {error}"
        )

        def __str__(self) -> str:
            """Return the error message template"""
            return self.value

    class AuthError(str, Enum):
        """Authentication-related error message templates"""
        NOT_CONFIGURED = "Authentication not configured. Configure authentication first."
        UNAUTHORIZED = (
            "Unauthorized (401). Verify that your token is valid and has not expired. "
            "Try logging in again with: oc login"
        )
        FORBIDDEN = (
            "Forbidden (403). Your credentials are valid but lack necessary permissions. "
            "Overriding cluster operators requires cluster-admin."
        )

        def __str__(self) -> str:
            """Return the error message template"""
            return self.value

    class OverrideError(str, Enum):
        """Override workflow error message templates"""
        COMPONENT_REQUIRED = "clusteroperator/name must be specified"
        COMPONENT_NOT_FOUND = (
            "Cluster operator '{name}' not found.\n"
            "List valid names with: oc get clusteroperators"
        )
        WORKLOAD_NOT_FOUND = (
            "Deployment '{name}' not found in namespace '{namespace}' ({candidates} candidates found).\n"
            "Supply the deployment name explicitly with --deployment"
        )
        OPERAND_IMAGE_NOT_FOUND = "no {env} env var found in deployment {namespace}/{name}"
        CONFLICT_RETRIES_EXHAUSTED = (
            "Gave up after repeated update conflicts on {resource}. "
            "Another controller keeps modifying it; re-run the command."
        )

        def __str__(self) -> str:
            """Return the error message template"""
            return self.value

    class ValidationError(str, Enum):
        """Command-line validation error message templates"""
        IMAGE_WITH_MANAGED = "--image cannot be used together with --managed"
        OPERAND_WITH_MANAGED = "--operand-image and --verbosity cannot be used together with --managed"
        NOTHING_TO_DO = "at least one of --image, --operand-image or --verbosity must be specified"
        INVALID_VERBOSITY = "--verbosity must be a non-negative integer, got: {value}"
        SERVER_TOKEN_PAIR = "--server and --token must be specified together"

        def __str__(self) -> str:
            """Return the error message template"""
            return self.value


class FileConstants:
    """File related constants"""

    DEFAULT_CONFIG_FILE = "operator-dev-config.yaml"
