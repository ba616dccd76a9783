import logging

from tagrate_checker.logging_config import LOGGER_NAME, get_logger, setup_logging


def test_setup_logging_twice_keeps_one_console_handler():
    setup_logging(level=logging.INFO)
    logger = setup_logging(level=logging.ERROR)

    assert len(logger.handlers) == 1
    assert logger.handlers[0].level == logging.ERROR


def test_setup_logging_adds_debug_file_handler(tmp_path):
    log_file = tmp_path / "logs" / "run.log"

    logger = setup_logging(level=logging.WARNING, log_file=log_file)
    get_logger(f"{LOGGER_NAME}.tests").debug("written to file only")
    for handler in logger.handlers:
        handler.flush()

    assert len(logger.handlers) == 2
    assert "written to file only" in log_file.read_text(encoding="utf-8")
    setup_logging()
