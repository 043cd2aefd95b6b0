"""
Main Application

Command-line entry point and orchestration for the operator-dev tool.
"""

import argparse
import logging
import sys
import urllib3
from typing import Any, Dict, List, Optional

from kubernetes.client.rest import ApiException

from .core import ClusterAuth, ConfigManager, setup_logging, disable_ssl_warnings, handle_api_error
from .core.constants import ErrorMessages, RetryConstants
from .core.exceptions import OperatorDevError, ValidationError
from .override import Backoff, OverrideRequest, OverrideService

logger = logging.getLogger(__name__)


class OperatorDevManager:
    """Main application orchestrator for the operator-dev tool"""

    def __init__(
        self,
        auth_provider: Optional[ClusterAuth] = None,
        config_provider: Optional[ConfigManager] = None,
        skip_tls: bool = False,
        debug: bool = False
    ):
        """
        Initialize the manager with dependency injection

        Args:
            auth_provider: Authentication provider (defaults to ClusterAuth)
            config_provider: Configuration provider (defaults to ConfigManager)
            skip_tls: Whether to skip TLS verification
            debug: Enable debug logging
        """
        setup_logging(debug)

        if skip_tls:
            disable_ssl_warnings()

        self.auth = auth_provider or ClusterAuth(skip_tls=skip_tls)
        self.config_manager = config_provider or ConfigManager()

        # Created once authentication succeeds
        self.override_service: Optional[OverrideService] = None

    def configure_authentication(self, server: str = None, token: str = None, kubeconfig: str = None,
                                 context: str = None, namespace: str = None) -> bool:
        """
        Configure authentication and initialize services

        Returns:
            bool: True if authentication configured successfully
        """
        try:
            if not self.auth.configure_auth(server=server, token=token, kubeconfig=kubeconfig,
                                            context=context, namespace=namespace):
                return False
        except OperatorDevError as e:
            logger.error(f"Failed to configure authentication: {e}")
            return False

        apps_api, custom_api = self.auth.get_kubernetes_clients()
        self.override_service = OverrideService(
            apps_api=apps_api,
            custom_api=custom_api,
            backoff=Backoff.from_config(self.config_manager.get_section('retry')),
            settle_delay=self.config_manager.get_value('override.settle_delay',
                                                       RetryConstants.DEFAULT_SETTLE_DELAY),
        )

        logger.debug("Successfully configured authentication and services")
        return True

    def generate_config(self, output_dir: str = None) -> str:
        """Generate configuration template, returns its path"""
        return self.config_manager.generate_config_template(output_dir)

    def override(self, request: OverrideRequest) -> int:
        """
        Run the override workflow

        Returns:
            int: Exit code (0 for success, 1 for error)
        """
        try:
            if not self.override_service:
                raise OperatorDevError(str(ErrorMessages.AuthError.NOT_CONFIGURED))

            try:
                self.override_service.run(request)
            except (ApiException, urllib3.exceptions.HTTPError) as e:
                handle_api_error(e, context=f"override of {request.operator_name}")

            return 0

        except OperatorDevError as e:
            logger.debug(f"Override failed: {e!r}")
            print(f"Error: {e}", file=sys.stderr)
            return 1


def create_operator_dev_manager(skip_tls: bool = False, debug: bool = False,
                                config_provider: Optional[ConfigManager] = None) -> OperatorDevManager:
    """
    Factory function to create OperatorDevManager with default dependencies

    Args:
        skip_tls: Whether to skip TLS verification
        debug: Enable debug logging
        config_provider: Already loaded configuration (optional)

    Returns:
        OperatorDevManager: Configured instance
    """
    return OperatorDevManager(config_provider=config_provider, skip_tls=skip_tls, debug=debug)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create argument parser with subcommands using parent parsers for shared flags"""

    # Common parser: arguments shared by ALL commands
    common_parser = argparse.ArgumentParser(add_help=False)
    common_parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    common_parser.add_argument('--config', help='Configuration file path')

    # Connection flags, passed through to the kubernetes client unchanged
    auth_parser = argparse.ArgumentParser(add_help=False)
    auth_parser.add_argument('--kubeconfig', help='Path to the kubeconfig file to use')
    auth_parser.add_argument('--context', help='Name of the kubeconfig context to use')
    auth_parser.add_argument('-n', '--namespace', help='Namespace scope for this CLI request')
    auth_parser.add_argument('--server', help='Address of the Kubernetes API server')
    auth_parser.add_argument('--token', help='Bearer token for authentication to the API server')
    auth_parser.add_argument('--insecure-skip-tls-verify', dest='skip_tls', action='store_true',
                             help='Skip TLS certificate verification')

    parser = argparse.ArgumentParser(
        prog='operator-dev',
        description='operator-dev - Run custom builds of OpenShift cluster operators',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # stop the cluster version operator from managing kube-apiserver and use a custom image
  # ('kube-apiserver' must be a valid cluster operator name, see: oc get clusteroperators)
  operator-dev override kube-apiserver --image=docker.io/foo/apiserver:debug

  # make the openshift apiserver operator managed again
  operator-dev override openshift-apiserver --managed
        """
    )

    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    override_parser = subparsers.add_parser(
        'override',
        parents=[common_parser, auth_parser],
        help='Override the target operator image',
        description='Mark an operator Deployment unmanaged and replace its image, operand image or verbosity'
    )
    override_parser.add_argument('operator_name', nargs='?', metavar='clusteroperator/name',
                                 help='Cluster operator name (oc get clusteroperators)')
    override_parser.add_argument('--image', help='Image to use for the given operator')
    override_parser.add_argument('--operand-image', help='Image the operator deploys for its operand')
    override_parser.add_argument('--verbosity', help='Log level appended to the operator arguments as -v=N')
    override_parser.add_argument('--managed', action='store_true',
                                 help='Let the cluster version operator manage this operator again')
    override_parser.add_argument('--deployment', help='Operator deployment name, if it does not follow '
                                                      'the <name>-operator convention')

    config_parser = subparsers.add_parser(
        'generate-config',
        parents=[common_parser],
        help='Generate a configuration file template',
        description='Write a commented configuration file template'
    )
    config_parser.add_argument('--output', help='Output directory for the generated file')

    return parser


def merge_config_with_args(args: argparse.Namespace, config: Optional[Dict[str, Any]]) -> None:
    """
    Fill unset command-line arguments from the 'global' configuration section.

    Command-line arguments always take precedence.
    """
    if not config:
        return

    global_config = config.get('global') or {}
    for key in ('kubeconfig', 'context'):
        if hasattr(args, key) and not getattr(args, key) and global_config.get(key):
            setattr(args, key, global_config[key])
    for key in ('skip_tls', 'debug'):
        if hasattr(args, key) and not getattr(args, key) and global_config.get(key):
            setattr(args, key, True)


def request_from_args(args: argparse.Namespace) -> OverrideRequest:
    """Build an override request from parsed arguments"""
    return OverrideRequest(
        operator_name=args.operator_name,
        image=args.image,
        operand_image=args.operand_image,
        verbosity=args.verbosity,
        managed=args.managed,
        deployment=args.deployment,
    )


def handle_override_command(args: argparse.Namespace, manager: OperatorDevManager) -> int:
    """Handle override command execution."""
    request = request_from_args(args)
    if bool(args.server) != bool(args.token):
        raise ValidationError(str(ErrorMessages.ValidationError.SERVER_TOKEN_PAIR))
    request.validate()

    if not manager.configure_authentication(server=args.server, token=args.token, kubeconfig=args.kubeconfig,
                                            context=args.context, namespace=args.namespace):
        print("Error: Failed to configure cluster authentication", file=sys.stderr)
        return 1

    return manager.override(request)


def handle_generate_config_command(args: argparse.Namespace, manager: OperatorDevManager) -> int:
    """Handle generate-config command execution."""
    path = manager.generate_config(args.output)
    print(f"Configuration template written to {path}")
    return 0


# Command dispatcher mapping
COMMAND_HANDLERS = {
    'override': handle_override_command,
    'generate-config': handle_generate_config_command,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point

    Returns:
        int: Exit code (0 for success, non-zero for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        config_manager = ConfigManager()
        config = config_manager.load_config(args.config) if args.config else None
        merge_config_with_args(args, config)

        manager = create_operator_dev_manager(skip_tls=getattr(args, 'skip_tls', False),
                                              debug=args.debug, config_provider=config_manager)

        handler = COMMAND_HANDLERS[args.command]
        return handler(args, manager)

    except OperatorDevError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user.", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
