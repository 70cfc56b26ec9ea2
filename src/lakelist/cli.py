"""Command-line interface for lakelist.

Commands:
    - ls: List objects under an s3:// or localfs:// URI
    - get: Fetch one object's content
    - head: Show status and headers of one object
    - buckets: List buckets (or directories under a local root)

S3 credentials and region are read from the environment (AWS_REGION,
AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY, S3_ENDPOINT_URL); the options below
override them.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from . import __version__
from .models import FileObjectFilter, ObjectRecord
from .schemas import EnvironmentConfig
from .unified import ObjectStore, list_buckets, split_uri

app = typer.Typer(
    name="lakelist",
    help="List objects in S3 buckets and local directories.",
    no_args_is_help=True,
)


def version_callback(value: bool) -> None:
    """Display version information."""
    if value:
        typer.echo(f"lakelist {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", callback=version_callback, help="Show version."),
    ] = None,
) -> None:
    """
    lakelist: object store listing for S3 and local filesystems.
    """
    pass


RegionOption = Annotated[
    Optional[str],
    typer.Option("--region", help="AWS region name (overrides AWS_REGION)"),
]
EndpointUrlOption = Annotated[
    Optional[str],
    typer.Option("--endpoint-url", help="Custom S3 endpoint URL"),
]
ProfileOption = Annotated[
    Optional[str],
    typer.Option("--aws-profile", help="AWS CLI profile name (for S3 URIs)"),
]


def _load_config(
    region_name: Optional[str],
    endpoint_url: Optional[str],
    aws_profile: Optional[str],
) -> EnvironmentConfig:
    """Read the environment configuration and apply command line overrides."""
    return EnvironmentConfig.from_env().with_overrides(
        AWS_REGION=region_name,
        S3_ENDPOINT_URL=endpoint_url,
        AWS_PROFILE=aws_profile,
    )


def _format_row(record: ObjectRecord, long_format: bool) -> str:
    if not long_format:
        return record.name
    modified = record.last_modified.isoformat() if record.last_modified else "-"
    return f"{record.size:>12}  {modified:<25}  {record.name}"


class _EchoCallback:
    """Prints rows as they arrive."""

    def __init__(self, long_format: bool):
        self.long_format = long_format

    def on_row_add(self, record: ObjectRecord) -> None:
        typer.echo(_format_row(record, self.long_format))


@app.command("ls")
def ls_cmd(
    uri: Annotated[str, typer.Argument(help="s3://bucket/prefix or localfs://path")],
    recursive: Annotated[
        bool, typer.Option("--recursive", "-r", help="List virtual directories too")
    ] = False,
    max_files: Annotated[
        Optional[int],
        typer.Option("--max-files", "-m", help="Maximum number of entries to list"),
    ] = None,
    name: Annotated[
        Optional[str],
        typer.Option("--name", help="Regular expression for object names"),
    ] = None,
    size: Annotated[
        Optional[str],
        typer.Option("--size", help="Size filter, e.g. +10M or -1K"),
    ] = None,
    mtime: Annotated[
        Optional[str],
        typer.Option("--mtime", help="Modification time filter, e.g. -2d or +1h"),
    ] = None,
    long_format: Annotated[
        bool, typer.Option("--long", "-l", help="Show size and modification time")
    ] = False,
    stream: Annotated[
        bool, typer.Option("--stream", help="Print entries as pages arrive")
    ] = False,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    List objects under a URI.

    Examples:
        S3: lakelist ls s3://bucket/data/ --recursive --max-files 100
        Local: lakelist ls localfs:///srv/data --name '\\.csv$' --size +1M
    """
    try:
        config = _load_config(region_name, endpoint_url, aws_profile)
        store_uri, prefix = split_uri(uri)
        store = ObjectStore.from_uri(store_uri, config)

        filter = None
        if name is not None or size is not None or mtime is not None:
            filter = FileObjectFilter.parse(name=name, size=size, mtime=mtime)

        if stream:
            count = store.list_files_with_callback(
                prefix, recursive, max_files, filter, _EchoCallback(long_format)
            )
            if count == 0:
                typer.echo("No objects found.")
            return

        table = store.list_files(prefix, recursive, max_files, filter)
        if len(table):
            for record in table:
                typer.echo(_format_row(record, long_format))
        else:
            typer.echo("No objects found.")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("get")
def get_cmd(
    uri: Annotated[str, typer.Argument(help="s3://bucket or localfs://path")],
    key: Annotated[str, typer.Argument(help="Object key")],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Write content to this file"),
    ] = None,
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Fetch the content of one object.
    """
    try:
        config = _load_config(region_name, endpoint_url, aws_profile)
        data = ObjectStore.from_uri(uri, config).get_object(key)

        if output is not None:
            output.write_bytes(data)
            typer.echo(f"Wrote {len(data):,} bytes to {output}")
        else:
            typer.echo(data, nl=False)

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


@app.command("head")
def head_cmd(
    uri: Annotated[str, typer.Argument(help="s3://bucket or localfs://path")],
    key: Annotated[str, typer.Argument(help="Object key")],
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    Show the status code and headers of one object.
    """
    try:
        config = _load_config(region_name, endpoint_url, aws_profile)
        status, headers = ObjectStore.from_uri(uri, config).head_object(key)

        typer.echo(f"Status: {status}")
        for header, value in sorted(headers.items()):
            typer.echo(f"{header}: {value}")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if status == 404:
        raise typer.Exit(1)


@app.command("buckets")
def buckets_cmd(
    uri: Annotated[
        str, typer.Argument(help="s3:// for S3 buckets or localfs://path")
    ] = "s3://",
    region_name: RegionOption = None,
    endpoint_url: EndpointUrlOption = None,
    aws_profile: ProfileOption = None,
) -> None:
    """
    List buckets, or the directories under a local root.
    """
    try:
        config = _load_config(region_name, endpoint_url, aws_profile)
        buckets = list_buckets(uri, config)

        if buckets:
            for bucket in buckets:
                typer.echo(bucket.uri)
        else:
            typer.echo("No buckets found.")

    except Exception as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
