import json
import os
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from packages.miv_core.errors import StorageUnavailableError
from packages.miv_core.logging import get_logger
from packages.miv_session.dto import CandidateProfile, InterviewState, Question
from packages.miv_session.repository import SessionStore

logger = get_logger("miv_session.file_repo")

CANDIDATES_FILE = "candidates.json"
INTERVIEW_STATE_FILE = "interview_state.json"
QUESTIONS_FILE = "questions.json"


class JsonFileSessionStore(SessionStore):
    """
    File-based implementation of SessionStore.
    One directory per session, one JSON file per table ({record_id: record}).
    Single writer, last write wins.
    """

    def __init__(self, base_dir: str):
        self.base_dir = base_dir
        self._ensure_dir()

    def _ensure_dir(self):
        try:
            os.makedirs(self.base_dir, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create session directory {self.base_dir}: {e}")
            raise StorageUnavailableError(details={"path": self.base_dir}) from e

    def _path(self, filename: str) -> str:
        return os.path.join(self.base_dir, filename)

    def _load_table(self, filename: str) -> Dict[str, Any]:
        path = self._path(filename)
        if not os.path.exists(path):
            return {}
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load {path}: {e}")
            raise StorageUnavailableError(details={"path": path}) from e
        if not isinstance(data, dict):
            logger.error(f"Unexpected table layout in {path}")
            raise StorageUnavailableError(details={"path": path})
        return data

    def _save_table(self, filename: str, table: Dict[str, Any]) -> None:
        path = self._path(filename)
        tmp_path = f"{path}.tmp"
        try:
            with open(tmp_path, 'w', encoding='utf-8') as f:
                json.dump(table, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to save {path}: {e}")
            raise StorageUnavailableError(details={"path": path}) from e

    def get_candidate(self) -> Optional[CandidateProfile]:
        table = self._load_table(CANDIDATES_FILE)
        if not table:
            return None
        # Latest insert wins
        record = list(table.values())[-1]
        try:
            return CandidateProfile.model_validate(record)
        except ValidationError as e:
            raise StorageUnavailableError(details={"table": "candidates", "error": str(e)}) from e

    def save_candidate(self, candidate: CandidateProfile) -> None:
        table = self._load_table(CANDIDATES_FILE)
        table.pop(candidate.id, None)
        table[candidate.id] = candidate.model_dump(mode='json')
        self._save_table(CANDIDATES_FILE, table)

    def get_interview_state(self) -> Optional[InterviewState]:
        table = self._load_table(INTERVIEW_STATE_FILE)
        if not table:
            return None
        record = list(table.values())[-1]
        try:
            return InterviewState.model_validate(record)
        except ValidationError as e:
            raise StorageUnavailableError(details={"table": "interview_state", "error": str(e)}) from e

    def save_interview_state(self, state: InterviewState) -> None:
        # Singleton table: whatever was there is replaced
        self._save_table(INTERVIEW_STATE_FILE, {state.id: state.model_dump(mode='json')})

    def save_question(self, question: Question) -> None:
        table = self._load_table(QUESTIONS_FILE)
        table[question.id] = question.model_dump(mode='json')
        self._save_table(QUESTIONS_FILE, table)

    def get_all_questions(self) -> List[Question]:
        table = self._load_table(QUESTIONS_FILE)
        questions = []
        for question_id, record in table.items():
            try:
                questions.append(Question.model_validate(record))
            except ValidationError:
                logger.warning(f"Skipping malformed question snapshot {question_id}")
                continue
        return questions

    def clear_all(self) -> None:
        for filename in (CANDIDATES_FILE, INTERVIEW_STATE_FILE, QUESTIONS_FILE):
            path = self._path(filename)
            try:
                if os.path.exists(path):
                    os.remove(path)
            except OSError as e:
                logger.error(f"Failed to clear {path}: {e}")
                raise StorageUnavailableError(details={"path": path}) from e
