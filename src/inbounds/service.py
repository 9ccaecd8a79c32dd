from loguru import logger

from ..database import SessionManager
from ..models import Inbound
from ..repositories import InboundRepository


class PortConflictError(ValueError):
    """Some inbounds were rejected because their port is already taken."""

    def __init__(self, ports: list[int]):
        self.ports = list(ports)
        super().__init__(f"port already in use: {', '.join(str(port) for port in self.ports)}")


class InboundService:
    """Stores derived inbounds, refusing any that reuse an occupied port."""

    def __init__(self, session_manager: SessionManager) -> None:
        self.session_manager = session_manager

    def add_inbounds(self, inbounds: list[Inbound]) -> None:
        """Persist inbounds, skipping those whose port is already in use.

        Accepted inbounds are committed even when others are rejected.

        Raises:
            PortConflictError: If at least one inbound was rejected
        """
        rejected: list[int] = []
        with self.session_manager.session() as session:
            repo = InboundRepository(session)
            claimed: set[int] = set()
            for inbound in inbounds:
                # Port 0 marks a fallback inbound that does not bind
                if inbound.port and (inbound.port in claimed or repo.port_exists(inbound.port)):
                    logger.warning("Port {} already in use, skipping inbound {}", inbound.port, inbound.tag)
                    rejected.append(inbound.port)
                    continue
                claimed.add(inbound.port)
                repo.add(inbound)

        logger.info("Added {} inbound(s), rejected {}", len(inbounds) - len(rejected), len(rejected))
        if rejected:
            raise PortConflictError(rejected)

    def get_inbounds(self, user_id: int) -> list[Inbound]:
        with self.session_manager.session() as session:
            return InboundRepository(session).get_by_user(user_id)
