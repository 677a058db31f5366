"""Expose pipelines as HTTP endpoints described by an OpenAPI document."""

from .api import Api
from .errors import (
    ConflictError,
    ForbiddenError,
    MethodNotImplementedError,
    NotFoundError,
    PipelineError,
    RegistrationError,
    UnauthorizedError,
    ValidationError,
)
from .options import (
    INTERNAL_OPTION_PREFIX,
    filter_internal_options,
    filter_internal_parameters,
    is_internal_option,
    is_not_an_internal_option,
)
from .pipeline import PipelineAbstract, Results, SchemaBuilders, default_schema_builders
from .transport import TransportInterface
from .transport.rest import RestTransport

__all__ = [
    "Api",
    "ConflictError",
    "ForbiddenError",
    "INTERNAL_OPTION_PREFIX",
    "MethodNotImplementedError",
    "NotFoundError",
    "PipelineAbstract",
    "PipelineError",
    "RegistrationError",
    "RestTransport",
    "Results",
    "SchemaBuilders",
    "TransportInterface",
    "UnauthorizedError",
    "ValidationError",
    "default_schema_builders",
    "filter_internal_options",
    "filter_internal_parameters",
    "is_internal_option",
    "is_not_an_internal_option",
]
