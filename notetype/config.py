import logging
import os
from pathlib import Path

import yaml

from .errors import StorageError

# ---------------------------------------------------------------------
# CONFIGURATION
# ---------------------------------------------------------------------


def _home():
    try:
        return Path.home()
    except (RuntimeError, KeyError):
        return None


def _app_dir():
    home = _home()
    if home is None:
        return None
    return home / ".notetype"


def default_config() -> dict:
    app_dir = _app_dir()
    if app_dir is None:
        # No resolvable home directory: everything lives beside the notes.
        return {
            "notes_dir": ".",
            "journal_dir": "./journal",
            "templates_dir": "./templates",
            "theme_file": ".notetype-theme.json",
            "log_file": ".notetype.log",
            "log_level": "INFO",
        }
    return {
        "notes_dir": ".",
        "journal_dir": str(app_dir / "journal"),
        "templates_dir": str(app_dir / "templates"),
        "theme_file": str(app_dir / "theme.json"),
        "log_file": str(app_dir / "notetype.log"),
        "log_level": "INFO",
    }


def default_config_path() -> Path:
    env_path = os.environ.get("NOTETYPE_CONFIG", "").strip()
    if env_path:
        return Path(env_path).expanduser()
    app_dir = _app_dir()
    if app_dir is None:
        return Path(".notetype.yaml")
    return app_dir / "config.yaml"


def load_config(config_file: Path = None) -> dict:
    config_file = Path(config_file) if config_file else default_config_path()
    defaults = default_config()
    config = defaults.copy()
    if config_file.exists():
        try:
            with config_file.open("r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f) or {}
            if isinstance(user_config, dict):
                config.update({k: v for k, v in user_config.items() if v is not None})
            else:
                logging.error(f"Ignoring config file {config_file}: expected a mapping")
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Error loading config file {config_file}: {e}")
    else:
        try:
            config_file.parent.mkdir(parents=True, exist_ok=True)
            with config_file.open("w", encoding="utf-8") as f:
                yaml.dump(defaults, f, indent=2)
            logging.info(f"Default config file created at {config_file}")
        except OSError as e:
            logging.error(f"Error creating default config file: {e}")
    return config


def resolve_path(config: dict, key: str) -> Path:
    return Path(str(config[key])).expanduser()


def ensure_dir(path: Path) -> Path:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageError(f"could not create directory {path}: {e}") from e
    return path


def setup_logging(config: dict):
    log_file = resolve_path(config, "log_file")
    level = getattr(logging, str(config.get("log_level", "INFO")).upper(), logging.INFO)
    fmt = '%(asctime)s [%(levelname)s] %(message)s'
    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logging.basicConfig(level=level, format=fmt)
        logging.warning(f"Log directory unavailable, logging to stderr: {e}")
        return
    logging.basicConfig(filename=str(log_file), level=level, format=fmt)
