"""
Core Utilities

Logging setup, input validation and translation of Kubernetes API failures
into operator-dev errors.
"""

import logging
import re
import urllib3
from typing import Optional, Type

from kubernetes.client.rest import ApiException

from .constants import ErrorMessages, NetworkConstants
from .exceptions import OperatorDevError, AuthenticationError, ClusterAPIError, ValidationError

URL_PATTERN = re.compile(r'^https?://[a-zA-Z0-9.-]+(?::[0-9]+)?(?:/.*)?$')
DNS_1123_SUBDOMAIN = re.compile(r'^[a-z0-9]([-a-z0-9.]*[a-z0-9])?$')
MAX_NAME_LENGTH = 253


def setup_logging(debug: bool = False) -> None:
    """
    Send log records to stderr; stdout carries the progress lines.

    Args:
        debug: Log at DEBUG instead of INFO
    """
    level = logging.DEBUG if debug else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    # Calling this twice must not duplicate output
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s',
                                           datefmt='%Y-%m-%d %H:%M:%S'))
    root_logger.addHandler(handler)

    # The kubernetes client logs every request through urllib3
    logging.getLogger('urllib3').setLevel(logging.WARNING)

    logging.getLogger(__name__).debug("Debug logging enabled")


def disable_ssl_warnings() -> None:
    """Silence urllib3's per-request warning when --insecure-skip-tls-verify is used"""
    urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)


def mask_sensitive_info(text: str, token: str = None) -> str:
    """
    Hide bearer tokens in text that may be logged or printed.

    OpenShift token prefixes such as "sha256~" are kept so the token type stays visible.
    """
    if not text:
        return text

    if token:
        kept = token.split('~', 1)[0] + '~' if '~' in token else ''
        text = text.replace(token, kept + "***")

    text = re.sub(r'(Bearer\s+)\S+', r'\1***', text)
    return re.sub(r'(sha256~)[\w-]+', r'\1***', text)


def validate_openshift_url(url: str) -> bool:
    """
    Check that --server looks like an http(s) API endpoint.

    Raises:
        ValidationError: If the URL is empty or malformed
    """
    if not url or not isinstance(url, str):
        raise ValidationError("Server URL cannot be empty")

    if not URL_PATTERN.match(url):
        raise ValidationError(f"Invalid server URL format: {url}")

    return True


def validate_resource_name(name: str, kind: str = "resource") -> bool:
    """
    Validate a Kubernetes object name (DNS-1123 subdomain).

    Args:
        name: Name to validate
        kind: What the name refers to, used in error messages

    Returns:
        bool: True if valid name

    Raises:
        ValidationError: If name is invalid
    """
    if not name or not isinstance(name, str):
        raise ValidationError(f"{kind} name cannot be empty")

    if len(name) > MAX_NAME_LENGTH:
        raise ValidationError(f"{kind} name too long (max {MAX_NAME_LENGTH} chars): {name}")

    if not DNS_1123_SUBDOMAIN.match(name):
        raise ValidationError(f"Invalid {kind} name format: {name}")

    return True


def api_status(error: Exception) -> Optional[int]:
    """Return the HTTP status of an ApiException, or None for other errors"""
    if isinstance(error, ApiException):
        return error.status
    return None


def is_not_found(error: Exception) -> bool:
    """Check whether an error is a Kubernetes 404"""
    return api_status(error) == NetworkConstants.HTTPStatus.NOT_FOUND


def is_conflict(error: Exception) -> bool:
    """Check whether an error is an optimistic-concurrency conflict (409)"""
    return api_status(error) == NetworkConstants.HTTPStatus.CONFLICT


def handle_ssl_error(error: Exception, exception_class: Type[OperatorDevError] = AuthenticationError) -> None:
    """
    Re-raise a transport failure as exception_class, pointing at
    --insecure-skip-tls-verify when certificates are the problem.
    """
    details = str(error)

    if "certificate verify failed" in details or "CERTIFICATE_VERIFY_FAILED" in details:
        raise exception_class(str(ErrorMessages.SSLError.CERT_VERIFICATION_FAILED)) from error
    if "SSLError" in details or "SSL:" in details:
        raise exception_class(ErrorMessages.SSLError.CONNECTION_ERROR.format(error=error)) from error
    raise exception_class(f"Connection error: {error}") from error


def handle_api_error(error: Exception, context: str = "",
                     exception_class: Type[OperatorDevError] = ClusterAPIError) -> None:
    """
    Translate a Kubernetes client failure into an operator-dev error

    Args:
        error: The caught exception (ApiException or a urllib3 transport error)
        context: Operation that failed, prefixed to the message. For conflicts,
            the object that kept changing
        exception_class: The exception class raised for generic failures

    Raises:
        AuthenticationError: On 401 and 403
        OperatorDevError: exception_class for everything else, including exhausted conflicts
    """
    status = api_status(error)
    prefix = f"{context}: " if context else ""

    if status == NetworkConstants.HTTPStatus.UNAUTHORIZED:
        raise AuthenticationError(f"{prefix}{ErrorMessages.AuthError.UNAUTHORIZED}") from error

    if status == NetworkConstants.HTTPStatus.FORBIDDEN:
        raise AuthenticationError(f"{prefix}{ErrorMessages.AuthError.FORBIDDEN}") from error

    # context names the contended object
    if status == NetworkConstants.HTTPStatus.CONFLICT:
        raise exception_class(
            ErrorMessages.OverrideError.CONFLICT_RETRIES_EXHAUSTED.format(resource=context or "object")
        ) from error

    if status is None and any(marker in str(error).lower() for marker in ("ssl", "certificate", "tls")):
        handle_ssl_error(error, exception_class)

    if isinstance(error, ApiException):
        raise exception_class(f"{prefix}API error ({status} {error.reason or 'Unknown'})") from error

    raise exception_class(f"{prefix}{error}") from error
