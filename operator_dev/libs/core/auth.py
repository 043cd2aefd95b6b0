"""
Authentication Module

Handles cluster connection setup from kubeconfig, an explicit server/token pair,
or in-cluster service account credentials.
"""

import logging
from typing import Optional, Tuple
from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from .exceptions import AuthenticationError
from .utils import validate_openshift_url, handle_ssl_error, mask_sensitive_info, disable_ssl_warnings

logger = logging.getLogger(__name__)


class ClusterAuth:
    """Builds authenticated Kubernetes API clients"""

    def __init__(self, skip_tls: bool = False):
        """
        Initialize cluster authentication handler

        Args:
            skip_tls: Whether to skip TLS verification for requests
        """
        self.skip_tls = skip_tls
        self.server = None
        self.namespace = None
        self.api_client = None
        self.apps_api = None
        self.custom_api = None

    def configure_auth(self, server: str = None, token: str = None, kubeconfig: str = None,
                       context: str = None, namespace: str = None) -> bool:
        """
        Configure authentication with an explicit server and token, or discover it
        from kubeconfig / in-cluster config.

        Args:
            server: API server URL (optional, requires token)
            token: Bearer token (optional, requires server)
            kubeconfig: Path to kubeconfig file (optional)
            context: kubeconfig context to use (optional)
            namespace: Namespace override recorded for the session (optional)

        Returns:
            bool: True if authentication was configured successfully

        Raises:
            AuthenticationError: If authentication configuration fails
        """
        configuration = client.Configuration()

        if server and token:
            validate_openshift_url(server)
            logger.info("Using provided server URL and token for authentication")
            logger.debug(f"Bearer token: {mask_sensitive_info(token, token)}")
            configuration.host = server
            configuration.api_key = {"authorization": token}
            configuration.api_key_prefix = {"authorization": "Bearer"}
        else:
            self._load_from_context(configuration, kubeconfig, context)

        if self.skip_tls:
            configuration.verify_ssl = False
            configuration.ssl_ca_cert = None
            disable_ssl_warnings()

        self.server = configuration.host
        if namespace:
            self.namespace = namespace

        try:
            self.api_client = client.ApiClient(configuration)
        except Exception as e:
            handle_ssl_error(e, AuthenticationError)

        self.apps_api = client.AppsV1Api(self.api_client)
        self.custom_api = client.CustomObjectsApi(self.api_client)

        logger.debug(f"Configured Kubernetes client for {self.server} (namespace: {self.namespace or 'default'})")
        return True

    def _load_from_context(self, configuration: client.Configuration,
                           kubeconfig: Optional[str], context: Optional[str]) -> None:
        """
        Load kubeconfig into the given configuration, falling back to in-cluster
        config when no kubeconfig was requested explicitly.

        Raises:
            AuthenticationError: If neither source is usable
        """
        try:
            config.load_kube_config(config_file=kubeconfig, context=context,
                                    client_configuration=configuration)
            contexts, active_context = config.list_kube_config_contexts(config_file=kubeconfig)
            if context:
                active_context = next((c for c in contexts if c.get('name') == context), None)
            if active_context:
                logger.info(f"Loaded kubeconfig context {active_context.get('name')}")
                self.namespace = active_context.get('context', {}).get('namespace')
            return
        except (ConfigException, OSError) as kubeconfig_error:
            if kubeconfig or context:
                raise AuthenticationError(f"Failed to load kubeconfig: {kubeconfig_error}")
            logger.warning(f"Failed to load kubeconfig: {kubeconfig_error}")

        try:
            config.load_incluster_config(client_configuration=configuration)
            logger.info("Successfully loaded in-cluster config")
        except ConfigException as incluster_error:
            raise AuthenticationError(
                f"No usable cluster credentials: kubeconfig not found and in-cluster config failed ({incluster_error})"
            )

    def is_authenticated(self) -> bool:
        """
        Check if authentication is properly configured

        Returns:
            bool: True if authenticated
        """
        return self.api_client is not None

    def get_kubernetes_clients(self) -> Tuple[client.AppsV1Api, client.CustomObjectsApi]:
        """
        Get initialized Kubernetes API clients

        Returns:
            Tuple of (apps_api, custom_api)

        Raises:
            AuthenticationError: If configure_auth has not succeeded yet
        """
        if not self.is_authenticated():
            raise AuthenticationError("Not authenticated - no Kubernetes client available")
        return self.apps_api, self.custom_api
