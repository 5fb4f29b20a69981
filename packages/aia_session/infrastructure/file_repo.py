import json
import os
import tempfile
from typing import Optional

from pydantic import ValidationError

from packages.aia_core.errors import PersistenceError
from packages.aia_core.logging import get_logger
from packages.aia_session.dto import InterviewSnapshot
from packages.aia_session.repository import SessionSnapshotRepository

logger = get_logger("aia.session.file_repo")

class JsonFileSnapshotRepository(SessionSnapshotRepository):
    """
    File-based implementation of SessionSnapshotRepository.
    The storage key maps to one JSON file: {base_dir}/{key}.json.
    Saves write a temporary file in the same directory and atomically rename it.
    """
    def __init__(self, base_dir: str, key: str = "ai-interview-assistant-data"):
        self.base_dir = base_dir
        self.key = key
        self.file_path = os.path.join(base_dir, f"{key}.json")
        self._ensure_dir()

    def _ensure_dir(self):
        if not os.path.exists(self.base_dir):
            try:
                os.makedirs(self.base_dir, exist_ok=True)
            except OSError as e:
                # save() reports the failure explicitly later
                logger.error(f"Failed to create directory {self.base_dir}: {e}")

    def load(self) -> Optional[InterviewSnapshot]:
        if not os.path.exists(self.file_path):
            return None
        try:
            with open(self.file_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            return InterviewSnapshot.model_validate(data)
        except (OSError, json.JSONDecodeError, ValidationError) as e:
            logger.error(f"Failed to load snapshot from {self.file_path}: {e}")
            return None

    def save(self, snapshot: InterviewSnapshot) -> None:
        data = snapshot.model_dump(mode='json', by_alias=True)
        self._ensure_dir()
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=f".{self.key}.", suffix=".tmp", dir=self.base_dir)
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, self.file_path)
        except OSError as e:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise PersistenceError(f"Failed to save snapshot to {self.file_path}", details={"error": str(e)}) from e

    def clear(self) -> None:
        try:
            if os.path.exists(self.file_path):
                os.remove(self.file_path)
        except OSError as e:
            raise PersistenceError(f"Failed to clear snapshot at {self.file_path}", details={"error": str(e)}) from e
