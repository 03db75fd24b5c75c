import yaml
from pathlib import Path
import os
import re
import logging

_ENV_REF = re.compile(r"\$\{(\w+)(?::-([^}]*))?\}")


def _expand_env(value: str) -> str:
    """Expand ``${VAR}`` / ``${VAR:-default}`` references in a settings value."""
    return _ENV_REF.sub(lambda m: os.getenv(m.group(1)) or (m.group(2) or ""), value)


def load_config():
    """Load configuration from settings.yaml located in the package directory.

    The ``SF2TF_SETTINGS`` environment variable may point at an alternative
    settings file.
    """
    settings_path = None
    try:
        package_dir = Path(__file__).parent.parent
        project_root = package_dir.parent

        override = os.getenv('SF2TF_SETTINGS')
        settings_path = Path(override) if override else package_dir / 'settings.yaml'

        if not settings_path.exists():
            logging.error(f"Critical: settings.yaml not found at expected path: {settings_path}")
            raise FileNotFoundError(f"settings.yaml not found at {settings_path}")

        with open(settings_path, encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if not config_data:
            config_data = {}
            logging.warning(f"settings.yaml at {settings_path} is empty or invalid.")

        # Ensure base_dirs paths are absolute, resolved from project_root
        resolved_base_dirs = {}
        if 'base_dirs' in config_data:
            for key, path_str in config_data['base_dirs'].items():
                if isinstance(path_str, str):
                    path_str = _expand_env(path_str)
                    if not os.path.isabs(path_str):
                        resolved_base_dirs[key] = str((project_root / path_str).resolve())
                    else:
                        resolved_base_dirs[key] = path_str
                else:
                    resolved_base_dirs[key] = path_str
            config_data['base_dirs'] = resolved_base_dirs
        else:
            logging.info("'base_dirs' not found in settings.yaml.")
            config_data['base_dirs'] = {}

        config_data.setdefault('conversion', {})
        return config_data

    except FileNotFoundError as fnfe:
        logging.error(f"Configuration Error: {fnfe}", exc_info=True)
        raise
    except yaml.YAMLError as ye:
        logging.error(f"Error parsing {settings_path}: {ye}", exc_info=True)
        raise Exception(f"Failed to load application configuration: {ye}") from ye

# Load config at import time
try:
    config = load_config()
except Exception as e:
    logging.critical(f"CRITICAL FAILURE: Could not load application settings. Error: {e}", exc_info=True)
    raise SystemExit(f"Application cannot start due to configuration load failure: {e}")
