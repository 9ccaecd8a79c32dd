from .collaborators import IdentitySource, InboundsSink, RequestContext, RequestContextIdentity
from .extractor import InboundExtractor
from .models import InboundTemplate
from .service import InboundService, PortConflictError

__all__ = [
    "IdentitySource",
    "InboundsSink",
    "RequestContext",
    "RequestContextIdentity",
    "InboundExtractor",
    "InboundTemplate",
    "InboundService",
    "PortConflictError",
]
