"""
Persistence of commit analyses with SQLAlchemy.

The aggregate is flattened into a single row; files and suggestions go into
JSON text columns and are rebuilt into domain objects on read.
"""

import json
import logging
from datetime import timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ..models import CommitAnalysisRecord
from ..pipeline.entities import CommitAnalysis, CommitFile, as_utc
from ..pipeline.errors import DomainError
from ..pipeline.rating import CleanCodeRating
from ..pipeline.suggestions import Suggestion

logger = logging.getLogger(__name__)


def _dump_file(commit_file: CommitFile) -> dict:
    return {
        "path": commit_file.path,
        "language": commit_file.language,
        "added_lines": commit_file.added_lines,
        "removed_lines": commit_file.removed_lines,
        "content": commit_file.content,
        "rating": commit_file.rating.model_dump(mode="json") if commit_file.rating else None,
        "suggestions": [s.model_dump(mode="json") for s in commit_file.suggestions],
    }


def _load_file(data: dict) -> CommitFile:
    rating = data.get("rating")
    return CommitFile(
        path=data["path"],
        language=data["language"],
        added_lines=data["added_lines"],
        removed_lines=data["removed_lines"],
        content=data.get("content", ""),
        rating=CleanCodeRating.model_validate(rating) if rating else None,
        suggestions=[Suggestion.model_validate(s) for s in data.get("suggestions", [])],
    )


def to_record(analysis: CommitAnalysis) -> CommitAnalysisRecord:
    """Flatten the aggregate into a row. Dates are stored as UTC wall time."""
    rating = analysis.rating
    return CommitAnalysisRecord(
        commit_id=analysis.commit_id,
        author=analysis.author,
        email=analysis.email,
        commit_date=as_utc(analysis.commit_date).astimezone(timezone.utc),
        analysis_date=as_utc(analysis.analysis_date).astimezone(timezone.utc),
        language=analysis.language,
        added_lines=analysis.added_lines,
        removed_lines=analysis.removed_lines,
        overall_note=analysis.overall_note,
        quality=rating.quality.value if rating else None,
        rating_data=rating.model_dump_json() if rating else None,
        files_data=json.dumps([_dump_file(f) for f in analysis.files]),
        suggestions_data=json.dumps([s.model_dump(mode="json") for s in analysis.suggestions]),
    )


def from_record(record: CommitAnalysisRecord) -> CommitAnalysis:
    return CommitAnalysis(
        commit_id=record.commit_id,
        author=record.author,
        email=record.email,
        commit_date=as_utc(record.commit_date),
        analysis_date=as_utc(record.analysis_date),
        language=record.language,
        added_lines=record.added_lines,
        removed_lines=record.removed_lines,
        files=[_load_file(f) for f in json.loads(record.files_data)],
        suggestions=[Suggestion.model_validate(s) for s in json.loads(record.suggestions_data)],
    )


class CommitAnalysisRepository:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def get_by_commit_id(self, commit_id: str) -> CommitAnalysis | None:
        with self.session_factory() as session:
            record = (
                session.query(CommitAnalysisRecord)
                .filter(CommitAnalysisRecord.commit_id == commit_id)
                .first()
            )
            return from_record(record) if record else None

    def add(self, analysis: CommitAnalysis) -> None:
        with self.session_factory() as session:
            session.add(to_record(analysis))
            try:
                session.commit()
            except IntegrityError as e:
                session.rollback()
                logger.error(f"Commit analysis for {analysis.commit_id} is already stored")
                raise DomainError(f"Commit analysis for {analysis.commit_id} already exists") from e
        logger.info(f"Stored commit analysis for {analysis.commit_id}")

    def list_recent(self, limit: int = 20) -> list[CommitAnalysis]:
        with self.session_factory() as session:
            records = (
                session.query(CommitAnalysisRecord)
                .order_by(CommitAnalysisRecord.analysis_date.desc())
                .limit(limit)
                .all()
            )
            return [from_record(r) for r in records]
