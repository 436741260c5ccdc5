"""ASGI entrypoint for the Rescue Radar API."""

from rescue_radar.api.app import create_app
from rescue_radar.containers import build_container

app = create_app(build_container())
