"""Contracts for the collaborators the inbound extractor talks to."""

from dataclasses import dataclass
from typing import Any, Protocol

from ..models import Inbound


class InboundsSink(Protocol):
    """Accepts derived inbounds and owns their persistence."""

    def add_inbounds(self, inbounds: list[Inbound]) -> None:
        ...


class IdentitySource(Protocol):
    """Resolves the user on whose behalf a request runs."""

    def current_user_id(self, context: Any) -> int:
        ...


@dataclass
class RequestContext:
    """Caller information attached to one settings request."""

    user_id: int


class RequestContextIdentity:
    """Identity source reading the user from a ``RequestContext``."""

    def current_user_id(self, context: Any) -> int:
        if not isinstance(context, RequestContext):
            raise ValueError("No logged in user in request context")
        return context.user_id
