import logging
import sys

from file_jobs import logger as fj_logger


def _stderr_handlers(base: logging.Logger) -> list[logging.Handler]:
    return [
        h for h in base.handlers if isinstance(h, logging.StreamHandler) and getattr(h, "stream", None) is sys.stderr
    ]


def test_setup_logger_idempotent_handlers():
    """Calling setup_logger() repeatedly should leave exactly one stderr StreamHandler."""
    base = fj_logger.setup_logger(level=logging.DEBUG)
    _ = fj_logger.setup_logger(level=logging.DEBUG)

    assert len(_stderr_handlers(base)) == 1
    assert base.propagate is False


def test_env_level_override(monkeypatch):
    monkeypatch.setenv("FILE_JOBS_LOG_LEVEL", "warning")
    base = fj_logger.setup_logger(level=logging.DEBUG)
    assert base.level == logging.WARNING
    monkeypatch.delenv("FILE_JOBS_LOG_LEVEL")
    assert fj_logger.setup_logger().level == logging.INFO


def test_category_filter(monkeypatch):
    monkeypatch.setenv("FILE_JOBS_LOG_CATS", "manager")
    base = fj_logger.setup_logger()
    (handler,) = _stderr_handlers(base)
    assert len(handler.filters) == 1

    def record(name: str) -> logging.LogRecord:
        return logging.LogRecord(name, logging.INFO, __file__, 1, "msg", None, None)

    flt = handler.filters[0]
    assert flt.filter(record("file_jobs.manager"))
    assert not flt.filter(record("file_jobs.executor"))

    monkeypatch.delenv("FILE_JOBS_LOG_CATS")
    fj_logger.setup_logger()
    assert handler.filters == []


def test_get_logger_child():
    assert fj_logger.get_logger("manager").name == "file_jobs.manager"
    assert fj_logger.get_logger().name == "file_jobs"
