# cli.py
import logging
import sys

import click

from files_gateway.config.settings import Settings, load_settings
from files_gateway.errors import ConfigurationError
from files_gateway.main import configure_logging, create_app

logger = logging.getLogger(__name__)


def _load_or_exit() -> Settings:
    try:
        return load_settings()
    except ConfigurationError as e:
        configure_logging()
        logger.error("%s", e.message)
        sys.exit(1)


@click.group()
def cli():
    """CLI commands for the Files Gateway"""
    pass


@cli.command()
@click.option("--host", default=None, help="Bind address (defaults to HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port to listen on (defaults to PORT or 8080)")
def serve(host, port):
    """Run the gateway with uvicorn"""
    import uvicorn

    settings = _load_or_exit()
    configure_logging(settings.log_level)

    app = create_app(settings)
    uvicorn.run(
        app,
        host=host or settings.host,
        port=port or settings.port,
        log_level=settings.log_level.lower(),
    )


@cli.command()
def show_config():
    """Show current configuration"""
    settings = _load_or_exit()

    print("Current Configuration:")
    print(f"  AWS Region: {settings.aws_region}")
    print(f"  AWS Endpoint: {settings.aws_endpoint_url}")
    print(f"  AWS Access Key ID: {settings.aws_access_key_id}")
    print(f"  AWS Secret Access Key: {'*' * 8}")
    print(f"  S3 Bucket: {settings.s3_bucket_name}")
    print(f"  Max Multipart Memory: {settings.max_multipart_memory} bytes")
    print(f"  Storage Timeouts: connect={settings.storage_connect_timeout}s read={settings.storage_read_timeout}s")
    print(f"  Listen: {settings.host}:{settings.port}")
    print(f"  Log Level: {settings.log_level}")


if __name__ == "__main__":
    cli()
