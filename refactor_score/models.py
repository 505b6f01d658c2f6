"""
SQLAlchemy models for persisted commit analyses
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class CommitAnalysisRecord(Base):
    """One completed commit analysis. Files and suggestions are stored as JSON text."""
    __tablename__ = "commit_analysis"

    id = Column(Integer, primary_key=True, autoincrement=True)
    commit_id = Column(String, nullable=False, unique=True, index=True)
    author = Column(String, nullable=False)
    email = Column(String, nullable=False)
    commit_date = Column(DateTime(timezone=True), nullable=False)
    analysis_date = Column(DateTime(timezone=True), nullable=False, index=True)
    language = Column(String, nullable=False)
    added_lines = Column(Integer, nullable=False, default=0)
    removed_lines = Column(Integer, nullable=False, default=0)

    # Commit-level rating, denormalized for listing / sorting
    overall_note = Column(Float, nullable=False, default=0.0)
    quality = Column(String)  # Nullable: no analyzed file
    rating_data = Column(Text)  # JSON: CleanCodeRating

    files_data = Column(Text, nullable=False)  # JSON: list of stored CommitFile objects
    suggestions_data = Column(Text, nullable=False)  # JSON: flattened list of Suggestion objects

    created_at = Column(DateTime(timezone=True), default=lambda: datetime.now(timezone.utc), nullable=False)

    def __repr__(self):
        return f"<CommitAnalysisRecord(id={self.id}, commit_id='{self.commit_id}', note={self.overall_note})>"
