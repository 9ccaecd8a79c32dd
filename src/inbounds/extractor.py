import json
from typing import Any

from loguru import logger

from ..models import Inbound, Protocol
from ..settings.errors import TemplateError
from .collaborators import IdentitySource, InboundsSink
from .models import InboundTemplate

_KNOWN_PROTOCOLS = {protocol.value for protocol in Protocol}


def _reject_constant(name: str) -> Any:
    raise ValueError(f"invalid json constant {name}")


class InboundExtractor:
    """Derives inbound records from the ``inbounds`` array of an Xray template.

    The template is otherwise opaque: only ``inbounds`` is read. Malformed
    entries are skipped rather than failing the batch.
    """

    def __init__(self, sink: InboundsSink, identity: IdentitySource) -> None:
        self.sink = sink
        self.identity = identity

    def extract(self, value: str, context: Any = None) -> list[Inbound]:
        """Build the inbounds described by a template value without ingesting them."""
        entries = self._inbound_entries(value)
        if not entries:
            return []
        return self._build(entries, context)

    def handle_template(self, value: str, context: Any = None) -> list[Inbound]:
        """Extract the template's inbounds and hand them to the sink in one call.

        Raises:
            TemplateError: If the value is not valid JSON or not a JSON object
            Exception: Any sink error not mentioning a port
        """
        entries = self._inbound_entries(value)
        if entries is None:
            return []

        inbounds = self._build(entries, context)
        logger.info("Ingesting {} inbound(s) from template", len(inbounds))
        try:
            self.sink.add_inbounds(inbounds)
        except Exception as e:
            # TODO: match on a dedicated sink error type once every sink raises one;
            # the substring check depends on the sink's message wording.
            if "port" not in str(e).lower():
                raise
            logger.warning("Some template inbounds were rejected: {}", e)
        return inbounds

    def _inbound_entries(self, value: str) -> list | None:
        """Return the raw ``inbounds`` list, or None when the template has none."""
        try:
            config = json.loads(value, parse_constant=_reject_constant)
        except (ValueError, TypeError) as e:
            raise TemplateError(f"xray template config is not valid json: {e}") from e

        if config is None:
            return None
        if not isinstance(config, dict):
            raise TemplateError(f"xray template config is not a json object: {type(config).__name__}")
        if "inbounds" not in config:
            return None
        entries = config["inbounds"]
        if not isinstance(entries, list):
            logger.debug("Template inbounds is not a list, ignoring")
            return None
        return entries

    def _build(self, entries: list, context: Any) -> list[Inbound]:
        user_id: int | None = None
        inbounds = []
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                logger.debug("Skipping template inbound #{}: not an object", index)
                continue

            if user_id is None:
                user_id = self.identity.current_user_id(context)

            template = InboundTemplate.from_json(entry)
            if not template.is_complete():
                logger.debug("Skipping template inbound #{} ({}): missing sub-document", index, template.tag)
                continue
            if template.protocol and template.protocol not in _KNOWN_PROTOCOLS:
                logger.debug("Template inbound #{} uses unknown protocol {}", index, template.protocol)

            inbounds.append(template.to_inbound(user_id))
        return inbounds
