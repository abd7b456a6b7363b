"""
Export and import of the whole database as a JSON file
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union

import aiofiles

from bamboozled.config import get_settings
from .exceptions import ImportFormatError
from .providers.base import DatabaseProvider

logger = logging.getLogger(__name__)


def default_export_path(export_dir: Optional[Union[str, Path]] = None) -> Path:
    """``<export_dir>/bamboozled-export-<timestamp>.json``"""
    directory = Path(export_dir or get_settings().export_dir)
    timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return directory / f"bamboozled-export-{timestamp}.json"


async def export_to_file(
    provider: DatabaseProvider,
    path: Optional[Union[str, Path]] = None
) -> Dict[str, Any]:
    """
    Write every table of the provider to a JSON file.

    Returns:
        Dict with the written path and the row count per export key
    """
    target = Path(path) if path else default_export_path()
    target.parent.mkdir(parents=True, exist_ok=True)

    export = await provider.export_data()

    async with aiofiles.open(target, "w", encoding="utf-8") as f:
        await f.write(json.dumps(export, indent=2, default=str))

    counts = {key: len(rows) for key, rows in export["data"].items()}
    logger.info(f"Exported database to {target}")
    return {"path": str(target), "counts": counts}


async def import_from_file(provider: DatabaseProvider, path: Union[str, Path]) -> Dict[str, int]:
    """
    Replace the provider's data with the contents of an export file.

    Raises:
        FileNotFoundError: the file does not exist
        ImportFormatError: the file is not JSON or not an export envelope
    """
    source = Path(path)
    if not source.exists():
        raise FileNotFoundError(f"Import file not found: {source}")

    async with aiofiles.open(source, "r", encoding="utf-8") as f:
        content = await f.read()

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ImportFormatError(f"Invalid JSON in {source}: {e}", e) from e

    if not isinstance(data, dict) or "version" not in data or not isinstance(data.get("data"), dict):
        raise ImportFormatError("Invalid import data format")

    logger.info(
        f"Importing export from {data.get('exportedAt', 'unknown date')} "
        f"(provider: {data.get('provider', 'unknown')}, version: {data['version']})"
    )
    await provider.import_data(data)

    counts = {key: len(rows or []) for key, rows in data["data"].items()}
    logger.info(f"Imported database from {source}")
    return counts
