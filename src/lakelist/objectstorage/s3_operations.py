"""S3 bucket backend: listing, object fetches and bucket enumeration.

Listing goes through the shared traversal engine; this module only knows how
to request and parse one ``ListObjectsV2`` page. Every request is routed
through the redirect handler, and a corrected client is kept for the rest of
the call.
"""

from typing import Optional

from botocore.exceptions import BotoCoreError

from lakelist.core import get_logger
from lakelist.core.exceptions import (
    ListError,
    ObjectNotFoundError,
    ParseError,
    TransportError,
    ValidationError,
)
from lakelist.models import BucketRecord, FileObjectFilter, Page
from lakelist.objectstorage.clients import S3ClientConfig, S3ClientManager
from lakelist.objectstorage.listing import (
    extract_continuation_token,
    list_files,
    parse_bucket_objects,
    parse_file_objects,
    request_with_redirect_handling,
)
from lakelist.schemas import EnvironmentConfig
from lakelist.table import ObjectTable, RowSink

logger = get_logger(__name__)

# Largest page ListObjectsV2 returns
S3_MAX_LIST_OBJECTS = 1000
DELIMITER = "/"


class S3PageRequester:
    """Issues listing page requests for one traversal.

    Holds the client manager currently in use. After a redirect the corrected
    manager replaces it, and no further redirect is tolerated.
    """

    def __init__(self, bucket: str, client_manager: S3ClientManager):
        self.bucket = bucket
        self.client_manager = client_manager
        self.redirected = False

    def fetch_page(
        self, prefix: Optional[str], max_keys: int, continuation_token: Optional[str]
    ) -> Page:
        kwargs = {"Bucket": self.bucket, "Delimiter": DELIMITER, "MaxKeys": max_keys}
        if prefix:
            kwargs["Prefix"] = prefix
        if continuation_token:
            kwargs["ContinuationToken"] = continuation_token

        response, corrected = request_with_redirect_handling(
            self.client_manager,
            lambda client: client.list_objects_v2(**kwargs),
            allow_redirect=not self.redirected,
            description=f"Listing s3://{self.bucket}/{prefix or ''}",
        )
        if corrected is not None:
            self.client_manager = corrected
            self.redirected = True

        records = parse_file_objects(response)
        if prefix and prefix.endswith(DELIMITER):
            # The listed directory's own marker object is not one of its entries
            records = [record for record in records if record.name != prefix]

        return Page(
            records=tuple(records), next_token=extract_continuation_token(response)
        )


class S3Bucket:
    """A bucket on S3 or an S3-compatible service."""

    max_page_size = S3_MAX_LIST_OBJECTS

    def __init__(self, name: str, config: EnvironmentConfig):
        """Initialize the bucket backend.

        Args:
            name: Bucket name
            config: Environment configuration with region and credentials

        Raises:
            ValidationError: If the bucket name is empty or contains a path
            ConfigError: If region or credentials are missing
        """
        if not name or DELIMITER in name:
            raise ValidationError(f"Invalid bucket name: '{name}'")

        self.name = name
        self.config = config
        self.client_config = S3ClientConfig.from_environment(config)
        logger.info(
            "S3 bucket backend initialized",
            bucket=name,
            region=self.client_config.region_name,
        )

    @property
    def uri(self) -> str:
        return f"s3://{self.name}"

    def list_files(
        self,
        prefix: Optional[str],
        recursive: bool,
        max_keys: Optional[int],
        filter: Optional[FileObjectFilter],
        table: RowSink,
    ) -> None:
        """List objects of the bucket into ``table``.

        Raises:
            ListError: If a page request or its parsing fails
        """
        logger.info(
            "Listing S3 objects",
            bucket=self.name,
            prefix=prefix,
            recursive=recursive,
            max_keys=max_keys,
        )
        requester = S3PageRequester(self.name, S3ClientManager(self.client_config))
        list_files(
            requester.fetch_page,
            prefix,
            recursive,
            max_keys,
            filter,
            table,
            self.max_page_size,
        )

    def get_object(self, key: str) -> bytes:
        """Fetch the content of one object.

        Raises:
            ObjectNotFoundError: If the key does not exist
            TransportError: If the request fails
        """
        logger.info("Getting S3 object", bucket=self.name, key=key)
        response, _ = request_with_redirect_handling(
            S3ClientManager(self.client_config),
            lambda client: client.get_object(Bucket=self.name, Key=key),
            description=f"Getting s3://{self.name}/{key}",
        )

        body = response["Body"]
        try:
            return body.read()
        except (BotoCoreError, OSError) as e:
            error_msg = f"Failed to read s3://{self.name}/{key}: {e}"
            logger.error(error_msg, error=str(e))
            raise TransportError(error_msg)
        finally:
            body.close()

    def head_object(self, key: str) -> tuple[int, dict[str, str]]:
        """Return the HTTP status and headers for one object.

        A missing object yields 404 and the not-found response headers rather
        than an error.

        Raises:
            TransportError: If the request fails for another reason
        """
        try:
            response, _ = request_with_redirect_handling(
                S3ClientManager(self.client_config),
                lambda client: client.head_object(Bucket=self.name, Key=key),
                description=f"Head s3://{self.name}/{key}",
            )
        except ObjectNotFoundError as e:
            logger.info("S3 object not found", bucket=self.name, key=key)
            return 404, e.headers

        metadata = response.get("ResponseMetadata", {})
        return metadata.get("HTTPStatusCode", 200), dict(metadata.get("HTTPHeaders", {}))

    @staticmethod
    def list_buckets(config: EnvironmentConfig) -> list[BucketRecord]:
        """List the buckets visible with the configured credentials.

        Failures of the request or of parsing are logged and yield an empty
        list.

        Raises:
            ConfigError: If region or credentials are missing
        """
        client_manager = S3ClientManager(S3ClientConfig.from_environment(config))

        try:
            response, _ = request_with_redirect_handling(
                client_manager,
                lambda client: client.list_buckets(),
                description="Listing S3 buckets",
            )
        except ListError as e:
            logger.error("Error listing S3 buckets", error=str(e))
            return []

        try:
            buckets = parse_bucket_objects(response)
        except ParseError as e:
            logger.error("Error parsing S3 bucket listing", error=str(e))
            return []

        logger.info("S3 buckets listed", bucket_count=len(buckets))
        return buckets


def list_objects_by_prefix(
    s3_path: str,
    config: EnvironmentConfig,
    recursive: bool = False,
    max_keys: Optional[int] = None,
    filter: Optional[FileObjectFilter] = None,
) -> ObjectTable:
    """Convenience function to list objects under an ``s3://bucket/prefix`` path.

    Args:
        s3_path: S3 path in format s3://bucket/prefix
        config: Environment configuration with region and credentials
        recursive: Whether to descend into virtual directories
        max_keys: Maximum number of entries to return
        filter: Optional client-side filter

    Returns:
        ObjectTable with the listed entries
    """
    bucket, prefix = S3ClientManager.parse_s3_path(s3_path)
    table = ObjectTable()
    S3Bucket(bucket, config).list_files(prefix or None, recursive, max_keys, filter, table)
    return table
