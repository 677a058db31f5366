"""REST transport exposing pipelines as CRUD resources."""

from .rest import RestTransport
from .validators import OpenAPIRequestValidator, OpenAPIValidationError

__all__ = ["OpenAPIRequestValidator", "OpenAPIValidationError", "RestTransport"]
