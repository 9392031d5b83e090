"""Application configuration for the propfile command-line tool."""
import logging
import os
import sys
from dataclasses import dataclass
from typing import Any, Dict, List

import yaml
from dotenv import load_dotenv

from propfile.logging_config import setup_logger
from propfile.properties import BoolEvaluator, Properties

DEFAULT_LOG_FILE_PATH = 'logs/propfile.log'


@dataclass
class AppConfig:
    """Application configuration dataclass."""
    # Paths
    project_root: str
    config_file_path: str

    # Logging
    log_level: str
    log_file_path: str
    log_to_console: bool

    # Value handling
    bool_true_values: List[str]
    bool_false_values: List[str]
    list_separator: str
    enable_events: bool

    # Processing settings
    dry_run: bool


def _compute_project_root() -> str:
    """Compute the project root directory."""
    package_dir = os.path.dirname(os.path.realpath(__file__))
    return os.path.abspath(os.path.join(package_dir, os.pardir))


def _dotenv_candidates(project_root: str) -> List[str]:
    return [os.path.join(os.getcwd(), '.env'), os.path.join(project_root, '.env')]


def _load_dotenv_files(project_root: str) -> None:
    """Load the first .env file found in the working directory or the project root."""
    for dotenv_path in _dotenv_candidates(project_root):
        if os.path.exists(dotenv_path):
            load_dotenv(dotenv_path)
            return


def _resolve_config_file(project_root: str) -> str:
    # PROPFILE_CONFIG_FILE (possibly coming from .env) wins over the default location.
    default_config_path = os.path.join(project_root, 'config.yaml')
    config_file = os.environ.get('PROPFILE_CONFIG_FILE', default_config_path)
    if not os.path.isabs(config_file):
        config_file = os.path.abspath(config_file)
    return config_file


def _load_yaml_config(config_file: str) -> Dict[str, Any]:
    """Load the YAML configuration file, falling back to an empty configuration on any problem."""
    config = {}
    try:
        if not os.path.exists(config_file):
            print(f"Warning: Configuration file '{config_file}' not found. Using default configuration.",
                  file=sys.stderr)
            return config

        if not os.access(config_file, os.R_OK):
            print(f"Error: Configuration file '{config_file}' exists but is not readable. Check file permissions.",
                  file=sys.stderr)
            return config

        with open(config_file, 'r', encoding='utf-8') as config_file_stream:
            loaded_config = yaml.safe_load(config_file_stream)
            if loaded_config is None:
                print(f"Warning: Configuration file '{config_file}' is empty. Using default configuration.",
                      file=sys.stderr)
            elif isinstance(loaded_config, dict):
                config = loaded_config
            else:
                print(f"Error: Configuration file '{config_file}' must contain a YAML dictionary. Using defaults.",
                      file=sys.stderr)

    except yaml.YAMLError as e:
        print(f"Error: Invalid YAML in configuration file '{config_file}': {e}", file=sys.stderr)
        print("Please check your YAML syntax. Using default configuration.", file=sys.stderr)
    except OSError as e:
        print(f"Error: Could not read configuration file '{config_file}': {e}", file=sys.stderr)
        print("Using default configuration.", file=sys.stderr)

    return config


def _log_dotenv_status(logger: logging.Logger, project_root: str) -> None:
    for dotenv_path in _dotenv_candidates(project_root):
        if os.path.exists(dotenv_path):
            logger.debug("Loaded environment variables from: %s", dotenv_path)
            return
    logger.debug("No .env file found. Relying on system environment variables if any.")


def build_bool_evaluator(config: AppConfig) -> BoolEvaluator:
    return BoolEvaluator(config.bool_true_values, config.bool_false_values)


def configure_properties(properties: Properties, config: AppConfig) -> Properties:
    """Apply the value-handling settings of ``config`` to a Properties instance."""
    properties.bool_evaluator = build_bool_evaluator(config)
    properties.list_separator = config.list_separator
    properties.enable_events = config.enable_events
    return properties


def load_app_config() -> AppConfig:
    """
    Load application configuration from the YAML file and environment variables.

    Environment variables override the file: ``PROPFILE_LOG_LEVEL``,
    ``PROPFILE_LIST_SEPARATOR`` and ``PROPFILE_DRY_RUN``.

    Returns:
        AppConfig: The loaded application configuration.
    """
    project_root = _compute_project_root()

    _load_dotenv_files(project_root)

    config_file = _resolve_config_file(project_root)
    config = _load_yaml_config(config_file)

    log_config = config.get('logging', {})
    log_level = os.environ.get('PROPFILE_LOG_LEVEL', log_config.get('log_level', 'INFO')).upper()
    log_file_path = log_config.get('log_file_path', DEFAULT_LOG_FILE_PATH)
    log_to_console = log_config.get('log_to_console', True)
    logger = setup_logger(log_level, log_file_path, log_to_console)

    _log_dotenv_status(logger, project_root)

    values_config = config.get('values', {})
    dry_run_env = os.environ.get('PROPFILE_DRY_RUN')
    if dry_run_env is not None:
        dry_run = dry_run_env.strip().lower() in ('1', 'true', 'yes')
    else:
        dry_run = config.get('dry_run', False)

    return AppConfig(
        project_root=project_root,
        config_file_path=config_file,
        log_level=log_level,
        log_file_path=log_file_path,
        log_to_console=log_to_console,
        bool_true_values=values_config.get('true_values', list(BoolEvaluator.DEFAULT_TRUES)),
        bool_false_values=values_config.get('false_values', list(BoolEvaluator.DEFAULT_FALSES)),
        list_separator=os.environ.get('PROPFILE_LIST_SEPARATOR', values_config.get('list_separator', ',')),
        enable_events=config.get('enable_events', True),
        dry_run=dry_run
    )
