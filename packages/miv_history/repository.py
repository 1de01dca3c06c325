import abc
import glob
import json
import os
import uuid
from datetime import datetime
from typing import List, Optional, Sequence

from pydantic import ValidationError

from packages.miv_core.logging import get_logger
from packages.miv_history.dto import InterviewRecord, InterviewRecordMetadata
from packages.miv_report.aggregator import summarize
from packages.miv_session.dto import CandidateProfile, Question

logger = get_logger("miv_history")


class InterviewRecordRepository(abc.ABC):
    """
    Abstract interface for the Interview Record API.
    """
    @abc.abstractmethod
    def save_interview(self, questions: Sequence[Question], candidate: CandidateProfile) -> str:
        """
        Save a completed interview and return the generated interview_id.
        """
        pass

    @abc.abstractmethod
    def find_by_id(self, interview_id: str) -> Optional[InterviewRecord]:
        """
        Find a record by its id. Returns None if not found.
        """
        pass

    @abc.abstractmethod
    def find_by_email(self, email: str) -> Optional[InterviewRecord]:
        """
        Find the first record of a candidate (case-insensitive email).
        Used to prevent re-taking an interview.
        """
        pass

    @abc.abstractmethod
    def find_all(self) -> List[InterviewRecordMetadata]:
        """
        Return metadata for all stored interviews, newest first.
        """
        pass


def build_record(interview_id: str, questions: Sequence[Question], candidate: CandidateProfile,
                 completed_at: datetime) -> InterviewRecord:
    summary = summarize(questions)
    return InterviewRecord(
        interview_id=interview_id,
        score=summary.average_score,
        completed_at=completed_at,
        candidate=candidate,
        questions=list(questions),
    )


def to_metadata(record: InterviewRecord, file_path: str) -> InterviewRecordMetadata:
    return InterviewRecordMetadata(
        interview_id=record.interview_id,
        timestamp=record.completed_at,
        candidate_name=record.candidate.name,
        candidate_email=record.candidate.email,
        score=record.score,
        answered_count=sum(1 for q in record.questions if q.is_answered),
        total_questions=len(record.questions),
        status=record.status,
        file_path=file_path,
    )


class MemoryInterviewRecordRepository(InterviewRecordRepository):
    """
    In-Memory implementation. Used for local development and testing.
    """
    def __init__(self):
        self._records: dict = {}

    def save_interview(self, questions: Sequence[Question], candidate: CandidateProfile) -> str:
        interview_id = str(uuid.uuid4())
        self._records[interview_id] = build_record(interview_id, questions, candidate, datetime.now())
        return interview_id

    def find_by_id(self, interview_id: str) -> Optional[InterviewRecord]:
        return self._records.get(interview_id)

    def find_by_email(self, email: str) -> Optional[InterviewRecord]:
        wanted = (email or "").strip().lower()
        for record in self._records.values():
            if record.candidate.email.strip().lower() == wanted:
                return record
        return None

    def find_all(self) -> List[InterviewRecordMetadata]:
        records = sorted(self._records.values(), key=lambda r: r.completed_at, reverse=True)
        return [to_metadata(r, "") for r in records]


class FileInterviewRecordRepository(InterviewRecordRepository):
    """
    File-based implementation of InterviewRecordRepository.
    Stores records as JSON files named YYYYMMDD_HHMMSS_{uuid}.json.
    """
    def __init__(self, base_dir: str = "data/interviews"):
        self.base_dir = base_dir
        self._ensure_dir()

    def _ensure_dir(self):
        if not os.path.exists(self.base_dir):
            try:
                os.makedirs(self.base_dir, exist_ok=True)
            except OSError as e:
                logger.error(f"Failed to create directory {self.base_dir}: {e}")

    def _generate_filename(self, timestamp: datetime, interview_id: str) -> str:
        # Format: YYYYMMDD_HHMMSS_{uuid}.json
        ts_str = timestamp.strftime("%Y%m%d_%H%M%S")
        return f"{ts_str}_{interview_id}.json"

    def _load(self, filepath: str) -> Optional[InterviewRecord]:
        try:
            with open(filepath, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return InterviewRecord.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.warning(f"Failed to load interview record from {filepath}: {e}")
            return None

    def _record_files(self) -> List[str]:
        if not os.path.exists(self.base_dir):
            return []
        files = [f for f in os.listdir(self.base_dir) if f.endswith(".json")]
        # Sort by filename descending (newest timestamp first)
        files.sort(reverse=True)
        return files

    def save_interview(self, questions: Sequence[Question], candidate: CandidateProfile) -> str:
        interview_id = str(uuid.uuid4())
        now = datetime.now()
        record = build_record(interview_id, questions, candidate, now)

        filepath = os.path.join(self.base_dir, self._generate_filename(now, interview_id))
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(record.model_dump(mode='json'), f, indent=2, ensure_ascii=False)
        except OSError:
            logger.exception(f"Failed to save interview record to {filepath}")
            raise
        logger.info(f"Saved interview {interview_id} for {candidate.email}")
        return interview_id

    def find_by_id(self, interview_id: str) -> Optional[InterviewRecord]:
        if not interview_id or "/" in interview_id or os.sep in interview_id:
            return None
        # Escaped so a wildcard in the id cannot match another record
        pattern = f"*_{glob.escape(interview_id)}.json"
        matches = glob.glob(os.path.join(glob.escape(self.base_dir), pattern))
        if not matches:
            return None
        return self._load(matches[0])

    def find_by_email(self, email: str) -> Optional[InterviewRecord]:
        wanted = (email or "").strip().lower()
        # Oldest first, the first completed interview is the one that counts
        for filename in reversed(self._record_files()):
            record = self._load(os.path.join(self.base_dir, filename))
            if record and record.candidate.email.strip().lower() == wanted:
                return record
        return None

    def find_all(self) -> List[InterviewRecordMetadata]:
        results = []
        for filename in self._record_files():
            record = self._load(os.path.join(self.base_dir, filename))
            if record is None:
                # Skip malformed files in list
                continue
            results.append(to_metadata(record, filename))
        return results
