from loguru import logger
from sqlalchemy.orm import Session

from ..models import Setting
from .base import BaseRepository


class SettingRepository(BaseRepository[Setting]):
    """Key/value access to the settings table.

    ``get`` returns ``None`` when a key has never been written; callers fall
    back to the default registry in that case.
    """

    def __init__(self, session: Session):
        super().__init__(Setting, session)

    def get(self, key: str) -> Setting | None:
        """Get the stored setting for a key."""
        return self.get_one_by(key=key)

    def upsert(self, key: str, value: str) -> Setting:
        """Create the row for a key, or overwrite its value if it exists."""
        setting = self.get(key)
        if setting is None:
            logger.debug("Creating setting {}", key)
            return self.create(key=key, value=value)

        setting.value = value
        self.session.flush()
        return setting
