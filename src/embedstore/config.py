"""
config.py
─────────
Configuration loader for embedstore.

Loads settings from a YAML file and builds the configured distance.
"""

import os

import yaml

from .distances import Distance, create_distance

# Project root (two levels up from src/embedstore/)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))
DEFAULT_CONFIG_PATH = os.path.join(PROJECT_ROOT, 'configs', 'default.yaml')


def load_config(config_path: str = None) -> dict:
    """Load configuration from a YAML file.

    Args:
        config_path: Path to the YAML config file.
                     Defaults to configs/default.yaml relative to project root.

    Returns:
        Parsed config dictionary with resolved paths.

    Raises:
        FileNotFoundError: If the config file does not exist.
    """
    if config_path is None:
        config_path = DEFAULT_CONFIG_PATH

    with open(config_path, 'r') as f:
        config = yaml.safe_load(f) or {}

    # Resolve relative embeddings path against project root
    embeddings_path = config.get('embeddings', {}).get('path', '')
    if embeddings_path and not os.path.isabs(embeddings_path):
        config['embeddings']['path'] = os.path.join(PROJECT_ROOT, embeddings_path)

    return config


def build_distance(config: dict) -> Distance:
    """Build the distance named by ``search.distance`` (default "cosine").

    Raises:
        ValueError: If the distance name is not recognized.
    """
    name = config.get('search', {}).get('distance', 'cosine')
    return create_distance(name)
