from datetime import datetime

from sqlalchemy import DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from polylingo.core.database import Base


class Favorite(Base):
    """Single translation result saved by the user"""

    __tablename__ = "favorites"

    id: Mapped[int] = mapped_column(primary_key=True)
    source_text: Mapped[str] = mapped_column(Text)
    translated_text: Mapped[str] = mapped_column(Text)
    source_language: Mapped[str] = mapped_column(String(8))
    target_language: Mapped[str] = mapped_column(String(8))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_favorite_unique", "source_text", "source_language", "target_language", unique=True),
    )

    def __repr__(self):
        return f"<Favorite(id={self.id}, {self.source_language}->{self.target_language})>"
