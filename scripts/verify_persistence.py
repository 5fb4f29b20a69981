import json
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import patch

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)

from packages.aia_core.errors import PersistenceError
from packages.aia_session.dto import CandidateSession, FinalizedCandidate, InterviewSnapshot
from packages.aia_session.infrastructure.file_repo import JsonFileSnapshotRepository
from packages.aia_session.infrastructure.memory_repo import MemorySnapshotRepository
from packages.aia_session.repository import SessionSnapshotRepository
from packages.aia_session.state import CandidateStatus
from packages.aia_session.store import SessionStateStore


class FailingRepository(SessionSnapshotRepository):
    def __init__(self):
        self.attempts = 0

    def load(self):
        return None

    def save(self, snapshot):
        self.attempts += 1
        raise PersistenceError("disk full")

    def clear(self):
        raise PersistenceError("read-only storage")


class TestJsonFileRepository(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.repo = JsonFileSnapshotRepository(base_dir=self.test_dir, key="test-key")

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def test_missing_file_loads_as_none(self):
        self.assertIsNone(self.repo.load())

    def test_save_and_load(self):
        session = CandidateSession(name="Alex Johnson", status=CandidateStatus.PAUSED, time_remaining=45)
        self.repo.save(InterviewSnapshot(current_candidate=session))

        self.assertTrue(os.path.exists(os.path.join(self.test_dir, "test-key.json")))
        loaded = self.repo.load()
        self.assertEqual(loaded.current_candidate.id, session.id)
        self.assertEqual(loaded.current_candidate.time_remaining, 45)
        self.assertEqual(loaded.completed_candidates, [])

    def test_file_uses_camel_case(self):
        self.repo.save(InterviewSnapshot(current_candidate=CandidateSession()))
        with open(self.repo.file_path, encoding="utf-8") as f:
            data = json.load(f)
        self.assertIn("currentCandidate", data)
        self.assertIn("completedCandidates", data)

    def test_no_temp_files_left_behind(self):
        self.repo.save(InterviewSnapshot(current_candidate=CandidateSession()))
        self.repo.save(InterviewSnapshot(current_candidate=CandidateSession()))
        self.assertEqual(os.listdir(self.test_dir), ["test-key.json"])

    def test_failed_replace_keeps_previous_file(self):
        first = CandidateSession(name="First")
        self.repo.save(InterviewSnapshot(current_candidate=first))

        with patch("packages.aia_session.infrastructure.file_repo.os.replace", side_effect=OSError("boom")):
            with self.assertRaises(PersistenceError):
                self.repo.save(InterviewSnapshot(current_candidate=CandidateSession(name="Second")))

        self.assertEqual(self.repo.load().current_candidate.name, "First")
        self.assertEqual(os.listdir(self.test_dir), ["test-key.json"])

    def test_corrupt_file_is_treated_as_absent(self):
        with open(self.repo.file_path, "w", encoding="utf-8") as f:
            f.write("{not json")
        self.assertIsNone(self.repo.load())

        with open(self.repo.file_path, "w", encoding="utf-8") as f:
            json.dump({"currentCandidate": {"status": "DANCING"}}, f)
        self.assertIsNone(self.repo.load())

    def test_clear(self):
        self.repo.save(InterviewSnapshot(current_candidate=CandidateSession()))
        self.repo.clear()
        self.assertFalse(os.path.exists(self.repo.file_path))
        self.repo.clear()  # clearing twice is fine


class TestSessionStateStore(unittest.TestCase):
    def test_load_from_empty_repository(self):
        store = SessionStateStore(MemorySnapshotRepository())
        self.assertFalse(store.load())
        self.assertEqual(store.current.status, CandidateStatus.UPLOAD)

    def test_archive_writes_once(self):
        repo = MemorySnapshotRepository()
        store = SessionStateStore(repo)
        session = CandidateSession(status=CandidateStatus.INTERVIEWING)
        store.replace_current(session)
        saves = repo.save_count

        record = FinalizedCandidate.freeze(session, CandidateStatus.COMPLETED, score=88, summary="ok")
        store.archive(record, CandidateSession())

        self.assertEqual(repo.save_count, saves + 1)
        self.assertEqual(repo.raw["completedCandidates"][0]["id"], session.id)
        self.assertNotEqual(repo.raw["currentCandidate"]["id"], session.id)
        self.assertIs(store.find_finalized(session.id), store.finalized[0])

    def test_load_restores_everything(self):
        repo = MemorySnapshotRepository()
        first = SessionStateStore(repo)
        session = CandidateSession(status=CandidateStatus.INTERVIEWING)
        first.archive(
            FinalizedCandidate.freeze(session, CandidateStatus.ABANDONED, score=0, summary="gone"),
            CandidateSession(name="Next")
        )

        second = SessionStateStore(repo)
        self.assertTrue(second.load())
        self.assertEqual(second.current.name, "Next")
        self.assertEqual(second.finalized[0].status, CandidateStatus.ABANDONED)

    def test_persistence_failure_is_not_fatal(self):
        repo = FailingRepository()
        store = SessionStateStore(repo)
        session = CandidateSession(name="Kept")

        store.replace_current(session)

        self.assertIs(store.current, session)
        self.assertIsInstance(store.last_persist_error, PersistenceError)
        self.assertFalse(store.persist())
        self.assertEqual(repo.attempts, 2)

    def test_clear_resets_memory_even_if_storage_fails(self):
        store = SessionStateStore(FailingRepository())
        store.current = CandidateSession(name="Old")
        store.clear()
        self.assertEqual(store.current.name, "")
        self.assertEqual(store.finalized, [])
        self.assertIsNotNone(store.last_persist_error)


if __name__ == '__main__':
    unittest.main()
