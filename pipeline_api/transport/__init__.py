"""Transports expose registered pipelines through an external interface."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - circular import guard
    from ..api import Api
    from ..pipeline import PipelineAbstract

__all__ = ["TransportInterface"]


class TransportInterface:
    """A way to expose pipelines: REST services, web sockets, query languages...

    The registry calls :meth:`init` once, then :meth:`use` once per registered
    pipeline, in registration order. Errors raised by either method propagate
    to the caller of the registry.
    """

    def init(self, api: "Api") -> None:  # pragma: no cover - documentation
        raise NotImplementedError

    def use(
        self, pipeline: "PipelineAbstract", name: str, plural_name: str
    ) -> None:  # pragma: no cover - documentation
        raise NotImplementedError
