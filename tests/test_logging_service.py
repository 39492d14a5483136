"""
Test the per-run file sink
"""

from loguru import logger

from xyz_agent_runtime.agent_runtime import LoggingService


class TestLoggingService:

    def test_disabled_adds_no_sink(self, tmp_path):
        service = LoggingService(log_dir=str(tmp_path), enabled=False)
        assert service.setup("triage") is None
        assert not service.is_active
        assert list(tmp_path.iterdir()) == []

    def test_enabled_writes_run_file(self, tmp_path):
        service = LoggingService(log_dir=str(tmp_path), enabled=True, log_level="DEBUG")
        assert service.setup("Triage Agent") == tmp_path
        assert service.is_active

        logger.info("hello from the run")
        service.cleanup()

        assert not service.is_active
        names = [p.name for p in tmp_path.iterdir()]
        assert names
        assert all(name.startswith("triage_agent_") for name in names)

    def test_cleanup_is_idempotent(self, tmp_path):
        service = LoggingService(log_dir=str(tmp_path), enabled=True)
        service.setup("run")
        service.cleanup()
        service.cleanup()
        assert not service.is_active
