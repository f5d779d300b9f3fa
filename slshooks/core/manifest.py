"""
Command manifest reader.

The manifest is the project descriptor holding named command lines under a
`scripts` key: package.json style JSON, or the same shape in YAML. It is read
as an ordered list of (name, command) pairs; a command is None when the entry
is null.
"""

import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

logger = logging.getLogger(__name__)

ScriptEntries = list[tuple[str, Optional[str]]]


class _Pairs(list):
    """JSON object kept as ordered key/value pairs, duplicates included."""


def _parse(manifest_path: Path) -> Any:
    text = manifest_path.read_text(encoding="utf-8")
    if manifest_path.suffix == ".json":
        return json.loads(text, object_pairs_hook=_Pairs)
    data = yaml.safe_load(text)
    if isinstance(data, dict):
        return _Pairs(data.items())
    return data


def _scripts_section(document: Any) -> list:
    if not isinstance(document, _Pairs):
        return []
    scripts: Any = None
    for key, value in document:
        if key == "scripts":
            scripts = value
    if isinstance(scripts, dict):
        return list(scripts.items())
    if isinstance(scripts, _Pairs):
        return list(scripts)
    return []


def read_scripts(manifest_path: Path) -> ScriptEntries:
    """Read the manifest's scripts. Unreadable manifests yield no entries."""
    try:
        document = _parse(manifest_path)
    except FileNotFoundError:
        logger.debug(f"No manifest at {manifest_path}")
        return []
    except (OSError, ValueError, yaml.YAMLError) as e:
        logger.warning(f"Ignoring unreadable manifest {manifest_path}: {e}")
        return []

    entries: ScriptEntries = []
    for name, command in _scripts_section(document):
        if command is not None and not isinstance(command, str):
            logger.warning(f"Script {name} in {manifest_path.name} is not a string, skipping")
            continue
        entries.append((str(name), command))
    return entries
