"""ASGI entrypoint for the location share API."""

from location_share.api.app import create_app
from location_share.containers import build_container

app = create_app(build_container())
