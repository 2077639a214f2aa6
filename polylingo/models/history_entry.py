from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from polylingo.core.database import Base


class HistoryEntry(Base):
    """One search in the translation history; a multi-target batch is a single entry"""

    __tablename__ = "history_entries"

    id: Mapped[int] = mapped_column(primary_key=True)
    source_language: Mapped[str] = mapped_column(String(8))
    target_language: Mapped[str] = mapped_column(String(16))
    source_text: Mapped[str] = mapped_column(Text)
    translated_text: Mapped[str] = mapped_column(Text)
    searched_data: Mapped[list] = mapped_column(JSON, default=list)
    searched_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_history_source", "source_text", "source_language"),
        Index("idx_history_searched_at", "searched_at"),
    )

    def __repr__(self):
        return f"<HistoryEntry(id={self.id}, source={self.source_language}, target={self.target_language})>"
