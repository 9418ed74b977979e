from fastapi import Request

from files_gateway.adapters.storage import S3Storage
from files_gateway.config.settings import Settings


def get_app_settings(request: Request) -> Settings:
    """Settings the app was composed with."""
    return request.app.state.settings


def get_storage(request: Request) -> S3Storage:
    """Storage adapter shared by every request."""
    return request.app.state.storage
