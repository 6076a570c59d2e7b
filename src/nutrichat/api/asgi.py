"""ASGI entrypoint for the NutriChat API."""

from nutrichat.api.app import create_app
from nutrichat.containers import build_container

app = create_app(build_container())
