"""
Catalog Model
Maps a part code to the directory holding its photos.
"""

from datetime import datetime
from sqlalchemy import Column, String, Text, DateTime
from photocatalog.database import Base


class CatalogEntry(Base):
    """
    One row per part code, written only by the indexer.
    """
    __tablename__ = "catalog_entries"

    part_code = Column(String(255), primary_key=True)
    directory_path = Column(Text, nullable=False)
    last_indexed_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<CatalogEntry(part_code='{self.part_code}', directory_path='{self.directory_path}')>"
