from datetime import datetime

from sqlalchemy import Column, DateTime, Integer, JSON, String

from .db import Base


class StoreSnapshot(Base):
	"""Latest persisted blog state, one row per storage key."""

	__tablename__ = "store_snapshots"

	key = Column(String(128), primary_key=True)
	payload = Column(JSON, nullable=False)
	version = Column(Integer, nullable=False, default=1)
	updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

	def __repr__(self):
		return f"<StoreSnapshot(key='{self.key}', version={self.version}, updated_at={self.updated_at})>"
