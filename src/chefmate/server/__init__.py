"""HTTP surface of ChefMate: the FastAPI app, its dependencies and the uvicorn runner."""

from chefmate.server.app import app, create_app

__all__ = ["app", "create_app"]
