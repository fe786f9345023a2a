"""
API module - FastAPI application factory.
"""

from knowledge_hub.api.app import create_app

__all__ = ["create_app"]
