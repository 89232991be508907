"""Utility functions for loading domain model documents.

This module provides functions for loading YAML model documents from
files, URLs and raw text with proper error handling and validation.
"""

from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests
import yaml

from .logging_config import get_logger

logger = get_logger(__name__)

MODEL_SUFFIXES = (".yaml", ".yml")


class ModelLoaderError(Exception):
    """Custom exception for model loading errors."""

    pass


def parse_yaml_text(text: str, source: str = "<text>") -> Any:
    """Deserialize YAML text.

    Args:
        text: YAML document.
        source: Description used in error messages.

    Returns:
        The deserialized document.

    Raises:
        ModelLoaderError: If the text is not valid YAML.
    """
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        logger.error(f"Invalid YAML in {source}: {e}")
        raise ModelLoaderError(f"Invalid YAML in {source}: {e}") from e


def read_model_file(file_path: str | Path, encoding: str = "utf-8") -> tuple[str, str]:
    """Read a model file without parsing it.

    Args:
        file_path: Path to the YAML file.
        encoding: Text encoding of the file.

    Returns:
        Tuple of (source description, file text).

    Raises:
        FileNotFoundError: If file doesn't exist.
        ModelLoaderError: If file cannot be read.
    """
    file_path = Path(file_path)
    logger.debug(f"Attempting to read model from file: {file_path}")

    if not file_path.exists():
        logger.error(f"File not found: {file_path}")
        raise FileNotFoundError(f"File not found: {file_path}")

    if file_path.suffix.lower() not in MODEL_SUFFIXES:
        logger.warning(f"File does not have a YAML extension: {file_path}")
        # Don't raise, just warn - might still be valid YAML

    try:
        text = file_path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as e:
        logger.error(f"Error reading file {file_path}: {e}", exc_info=True)
        raise ModelLoaderError(f"Error reading file {file_path}: {e}") from e

    return str(file_path), text


def read_model_url(url: str, timeout: int = 30) -> tuple[str, str]:
    """Fetch a model document from a URL without parsing it.

    Args:
        url: URL to fetch YAML from.
        timeout: Request timeout in seconds.

    Returns:
        Tuple of (source description, response text).

    Raises:
        ModelLoaderError: If URL is invalid or the request fails.
    """
    logger.debug(f"Attempting to fetch model from URL: {url}")

    parsed_url = urlparse(url)
    if not all([parsed_url.scheme, parsed_url.netloc]):
        logger.error(f"Invalid URL format: {url}")
        raise ModelLoaderError(f"Invalid URL: {url}")

    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        logger.error(f"Request timeout for URL: {url}")
        raise ModelLoaderError(f"Request timeout for URL: {url}") from e
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error for URL {url}: {e}")
        raise ModelLoaderError(f"Connection error for URL: {url}") from e
    except requests.exceptions.HTTPError as e:
        logger.error(f"HTTP error {e.response.status_code} for URL: {url}")
        raise ModelLoaderError(
            f"HTTP error {e.response.status_code} for URL: {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Request error for URL {url}: {e}", exc_info=True)
        raise ModelLoaderError(f"Request error for URL {url}: {e}") from e

    logger.info(f"Fetched model from {url}")
    return url, response.text
