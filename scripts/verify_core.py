import logging
import os
import shutil
import sys
import tempfile
import unittest
from unittest.mock import patch

# Ensure project root is in path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.append(project_root)

from packages.aia_core.config import AIAConfig
from packages.aia_core.dto import ContactInfoDTO, ResumeUploadDTO
from packages.aia_core.errors import AIABaseError, CollaboratorError, ConfigurationError
from packages.aia_core.logging import build_logging_config, get_logger
from packages.aia_service import dependencies
from packages.aia_session.engine import SessionController
from packages.aia_session.infrastructure.file_repo import JsonFileSnapshotRepository


class TestConfig(unittest.TestCase):
    def test_defaults(self):
        config = AIAConfig()
        self.assertEqual(config.PERSIST_KEY, "ai-interview-assistant-data")
        self.assertEqual(config.TIMER_TICK_SECONDS, 1.0)
        self.assertEqual(config.ROLE_TITLE, "Full Stack (React/Node)")

    def test_environment_override(self):
        with patch.dict(os.environ, {"MOCK_LATENCY_MS": "25", "DATA_DIR": "/tmp/aia"}):
            config = AIAConfig.load()
        self.assertEqual(config.MOCK_LATENCY_MS, 25)
        self.assertEqual(config.DATA_DIR, "/tmp/aia")

    def test_invalid_value_is_a_configuration_error(self):
        with patch.dict(os.environ, {"TIMER_TICK_SECONDS": "fast"}):
            with self.assertRaises(ConfigurationError) as ctx:
                AIAConfig.load()
        self.assertEqual(ctx.exception.code, "CONF_ERROR")


class TestErrorsAndDTOs(unittest.TestCase):
    def test_error_format(self):
        error = CollaboratorError("scoreAnswer", "timed out", details={"attempt": 1})
        self.assertIsInstance(error, AIABaseError)
        self.assertEqual(str(error), "[COLLABORATOR_ERROR] scoreAnswer: timed out")
        self.assertEqual(error.collaborator, "scoreAnswer")
        self.assertEqual(error.details, {"attempt": 1})

    def test_upload_extension(self):
        self.assertEqual(ResumeUploadDTO(file_name="CV.Final.PDF").extension, "pdf")
        self.assertEqual(ResumeUploadDTO(file_name="resume").extension, "")

    def test_contact_fields_are_trimmed(self):
        contact = ContactInfoDTO(name="  Alex ", email=" ", phone="555")
        self.assertEqual(contact.name, "Alex")
        self.assertEqual(contact.missing_fields(), ["email"])


class TestLogging(unittest.TestCase):
    def test_loggers_live_under_aia(self):
        self.assertEqual(get_logger("verify").name, "aia.verify")
        self.assertEqual(get_logger("aia.session.engine").name, "aia.session.engine")
        self.assertFalse(logging.getLogger("aia").propagate)
        self.assertTrue(logging.getLogger("aia").handlers)

    def test_build_config_for_other_directory(self):
        log_dir = tempfile.mkdtemp()
        try:
            config = build_logging_config(log_dir, console_level="WARNING")
            self.assertTrue(os.path.isdir(os.path.join(log_dir, "engine")))
            handlers = config["handlers"]
            self.assertEqual(handlers["console"]["level"], "WARNING")
            self.assertEqual(handlers["file_engine"]["filename"], os.path.join(log_dir, "engine", "engine.log"))
            self.assertEqual(handlers["file_error"]["level"], "ERROR")
            self.assertEqual(config["loggers"]["aia"]["handlers"], ["console", "file_engine", "file_error"])
        finally:
            shutil.rmtree(log_dir)


class TestDependencies(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self._clear_caches()

    def tearDown(self):
        self._clear_caches()
        shutil.rmtree(self.test_dir)

    def _clear_caches(self):
        for getter in (
            dependencies.get_config,
            dependencies.get_resume_parser,
            dependencies.get_question_generator,
            dependencies.get_answer_scorer,
            dependencies.get_report_generator,
            dependencies.get_snapshot_repository,
            dependencies.get_session_controller,
        ):
            getter.cache_clear()

    def test_controller_is_a_singleton(self):
        with patch.dict(os.environ, {"DATA_DIR": self.test_dir}):
            controller = dependencies.get_session_controller()
            self.assertIsInstance(controller, SessionController)
            self.assertIs(controller, dependencies.get_session_controller())

            repo = dependencies.get_snapshot_repository()
            self.assertIsInstance(repo, JsonFileSnapshotRepository)
            self.assertEqual(repo.file_path, os.path.join(self.test_dir, "ai-interview-assistant-data.json"))

            service = dependencies.get_interviewer_query_service()
            self.assertIs(service.controller, controller)
            self.assertIsNot(service, dependencies.get_interviewer_query_service())


if __name__ == '__main__':
    unittest.main()
