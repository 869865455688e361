"""ASGI entrypoint for the ingredient lists API."""

from ingredient_lists.api.app import create_app
from ingredient_lists.containers import build_container

app = create_app(build_container())
