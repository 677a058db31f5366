"""HTTP routes owned by the API registry."""

from .docs import create_docs_blueprint

__all__ = ["create_docs_blueprint"]
