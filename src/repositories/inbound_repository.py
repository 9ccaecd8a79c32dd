from sqlalchemy.orm import Session

from ..models import Inbound
from .base import BaseRepository


class InboundRepository(BaseRepository[Inbound]):
    """Repository for Inbound operations."""

    def __init__(self, session: Session):
        super().__init__(Inbound, session)

    def get_by_user(self, user_id: int) -> list[Inbound]:
        """Get all inbounds owned by a user."""
        return self.get_by(user_id=user_id)

    def get_by_port(self, port: int) -> Inbound | None:
        return self.get_one_by(port=port)

    def port_exists(self, port: int) -> bool:
        """Check whether a listener already occupies a port."""
        return self.exists(port=port)

    def add(self, inbound: Inbound) -> Inbound:
        """Persist an inbound built outside the session."""
        self.session.add(inbound)
        self.session.flush()
        return inbound
