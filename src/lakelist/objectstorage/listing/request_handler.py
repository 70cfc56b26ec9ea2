"""Redirect-tolerant execution of S3 requests.

S3 answers a request sent to the wrong regional endpoint with a redirect
(``PermanentRedirect`` / HTTP 301) or a signing-region complaint, and names the
bucket's real region in the ``x-amz-bucket-region`` header. A request is retried
once against a client bound to that region; the corrected client manager is
returned so that later requests of the same call go straight to it.
"""

from typing import Any, Callable, Optional

from botocore.exceptions import BotoCoreError, ClientError

from lakelist.core import get_logger
from lakelist.core.exceptions import (
    ObjectNotFoundError,
    RedirectLoopError,
    TransportError,
)
from lakelist.objectstorage.clients import S3ClientManager

logger = get_logger(__name__)

REDIRECT_ERROR_CODES = frozenset(
    {"PermanentRedirect", "301", "AuthorizationHeaderMalformed"}
)
NOT_FOUND_ERROR_CODES = frozenset({"NoSuchKey", "NotFound", "404"})

Operation = Callable[[Any], Any]


def _error_code(error: ClientError) -> str:
    return str(error.response.get("Error", {}).get("Code", ""))


def _status_code(error: ClientError) -> Optional[int]:
    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


def is_redirect(error: ClientError) -> bool:
    """Whether the service asked for the request to go to another region."""
    return _error_code(error) in REDIRECT_ERROR_CODES or _status_code(error) == 301


def redirect_region(error: ClientError) -> Optional[str]:
    """Extract the bucket's region from a redirect error, if the service sent it."""
    headers = error.response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
    region = headers.get("x-amz-bucket-region")
    if region:
        return region
    return error.response.get("Error", {}).get("Region")


def _wrap_client_error(error: ClientError, description: str) -> Exception:
    code = _error_code(error)
    if code in NOT_FOUND_ERROR_CODES:
        headers = error.response.get("ResponseMetadata", {}).get("HTTPHeaders", {})
        return ObjectNotFoundError(f"{description}: not found ({code})", headers)
    error_msg = f"{description} failed: {error}"
    logger.error(error_msg, error_code=code, status=_status_code(error))
    return TransportError(error_msg)


def request_with_redirect_handling(
    client_manager: S3ClientManager,
    operation: Operation,
    allow_redirect: bool = True,
    description: str = "S3 request",
) -> tuple[Any, Optional[S3ClientManager]]:
    """Run ``operation`` against the manager's client, following one redirect.

    Args:
        client_manager: Manager bound to the current endpoint
        operation: Callable issuing exactly one request with the given boto3 client
        allow_redirect: False when the caller already corrected its endpoint once
        description: Human readable request description for errors and logs

    Returns:
        Tuple of (response, corrected manager or None if no redirect happened)

    Raises:
        RedirectLoopError: If a redirect arrives when no further hop is allowed
        ObjectNotFoundError: If the requested key does not exist
        TransportError: If the request fails for any other reason
    """
    try:
        return operation(client_manager.client), None
    except ClientError as e:
        if not is_redirect(e):
            raise _wrap_client_error(e, description)
        if not allow_redirect:
            error_msg = f"{description}: redirected again after endpoint correction"
            logger.error(error_msg, region=client_manager.region_name)
            raise RedirectLoopError(error_msg)
        region = redirect_region(e)
        if not region:
            error_msg = f"{description}: redirect without a target region"
            logger.error(error_msg, error_code=_error_code(e))
            raise TransportError(error_msg)
    except BotoCoreError as e:
        error_msg = f"{description} failed: {e}"
        logger.error(error_msg, error=str(e))
        raise TransportError(error_msg)

    logger.info(
        "Following S3 redirect",
        description=description,
        from_region=client_manager.region_name,
        to_region=region,
    )
    corrected = client_manager.with_region(region)

    try:
        return operation(corrected.client), corrected
    except ClientError as e:
        if is_redirect(e):
            error_msg = f"{description}: redirected twice (last region {region})"
            logger.error(error_msg)
            raise RedirectLoopError(error_msg)
        raise _wrap_client_error(e, description)
    except BotoCoreError as e:
        error_msg = f"{description} failed: {e}"
        logger.error(error_msg, error=str(e))
        raise TransportError(error_msg)
