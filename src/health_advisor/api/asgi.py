"""ASGI entrypoint for the health advisor API."""

from health_advisor.api.app import create_app
from health_advisor.containers import build_container

app = create_app(build_container())
