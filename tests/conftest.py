import logging

import pytest

from propfile.app_config import AppConfig
from propfile.logging_config import LOGGER_NAME

SAMPLE_PROPERTIES = (
    "# Sample properties\n"
    "test.key.1 = value 1\n"
    "test.key.2 = value 2\n"
    "! another comment\n"
    "another.key = another value\n"
)


@pytest.fixture
def sample_properties_path(tmp_path):
    """A small properties file with three keys and two comments."""
    path = tmp_path / "sample.properties"
    path.write_text(SAMPLE_PROPERTIES, encoding="utf-8")
    return str(path)


@pytest.fixture
def app_config(tmp_path):
    """An AppConfig that logs nowhere and writes files."""
    return AppConfig(
        project_root=str(tmp_path),
        config_file_path=str(tmp_path / "config.yaml"),
        log_level="INFO",
        log_file_path=str(tmp_path / "logs" / "propfile.log"),
        log_to_console=False,
        bool_true_values=["true", "TRUE", "True", "1"],
        bool_false_values=["false", "FALSE", "False", "0"],
        list_separator=",",
        enable_events=True,
        dry_run=False
    )


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo any handler setup a test made on the package logger."""
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)
