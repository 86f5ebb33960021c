"""
Helpers for loading client environment configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from algoclient.io.credentials import ENV_FILENAME, ClientSettings

logger = logging.getLogger(__name__)


def default_env_path() -> Path:
    """
    Path of the user-level environment file, ``~/algorithmia.env``.
    """

    return Path.home() / ENV_FILENAME


def load_env(path: Optional[Path] = None) -> bool:
    """
    Loads variables from an env file into the process environment.

    Variables already set in the environment are not overridden.

    :param path: Env file to load, defaults to :func:`default_env_path`.
    :type path: Path, optional
    :return: True if the file existed and was loaded.
    :rtype: :class:`bool`
    """
    path = Path(path) if path is not None else default_env_path()
    if not path.is_file():
        return False
    logger.debug(f"Loading environment from {path}")
    return load_dotenv(path, override=False)


def load_settings(path: Optional[Path] = None) -> ClientSettings:
    """Loads the user env file and a project `.env` (if present), then reads :class:`ClientSettings`."""
    load_env(path)
    load_dotenv(find_dotenv(usecwd=True), override=False)
    return ClientSettings()
