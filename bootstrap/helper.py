"""
Common helpers for seeding configuration into AWS.

Exposed functions (signatures):
    load_yaml(path: pathlib.Path) -> dict[str, Any]
    yaml_config_files(root: pathlib.Path) -> Iterator[pathlib.Path]
    normalize_user_tags(tag_str: str) -> list[dict[str, str]]
    boto3_session(profile: str | None) -> "boto3.Session"

Behavior:
    - `load_yaml` safely loads YAML files, defaulting to {} for empty files.
    - `yaml_config_files` discovers files shaped as config/<env>.yaml.
    - `normalize_user_tags` converts "K1=V1,K2=V2" into AWS tag dicts.
    - `boto3_session` builds a boto3 session honoring an optional profile.

Raises:
    FileNotFoundError: When a provided path does not exist.
    ValueError: For malformed tag strings or YAML documents that aren't mappings.
"""

from __future__ import annotations

import pathlib
from typing import Any
from collections.abc import Iterator

import boto3
import yaml


def load_yaml(path: pathlib.Path) -> dict[str, Any]:
    """Load a YAML file into a Python dictionary.

    Returns {} for empty files.

    Raises:
        FileNotFoundError:
            If the file does not exist.
        ValueError:
            If the document is not a mapping.

    Example:
        >>> from pathlib import Path
        >>> load_yaml(Path("config/prod.yaml"))  # doctest: +SKIP
        {'secrets': {...}}
    """
    if not path.is_file():
        raise FileNotFoundError(f"YAML not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Top-level YAML document must be a mapping in {path}")
    return data


def yaml_config_files(root: pathlib.Path) -> Iterator[pathlib.Path]:
    """Yield config/<env>.yaml files under `root`, sorted by name.

    Example:
        >>> from pathlib import Path
        >>> list(yaml_config_files(Path("config")))  # doctest: +SKIP
        [PosixPath('config/dev.yaml'), PosixPath('config/prod.yaml')]
    """
    yield from sorted(p for p in root.glob("*.yaml") if p.is_file())


def normalize_user_tags(tag_str: str) -> list[dict[str, str]]:
    """Normalize a comma-separated tag string into AWS tag dicts.

    Input format:
        "Key1=Val1,Key2=Val2"

    Raises:
        ValueError:
            If an entry is malformed (missing '=' or empty key).

    Example:
        >>> normalize_user_tags("Owner=Payments,Service=paylink")
        [{'Key': 'Owner', 'Value': 'Payments'}, {'Key': 'Service', 'Value': 'paylink'}]
    """
    tags: list[dict[str, str]] = []
    for raw in (tag_str or "").split(","):
        item = raw.strip()
        if not item:
            continue  # trailing commas
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Malformed tag (expected key=value): '{item}'")
        if not key.strip():
            raise ValueError(f"Malformed tag (empty key): '{item}'")
        tags.append({"Key": key.strip(), "Value": value.strip()})
    return tags


def boto3_session(profile: str | None):
    """Return a boto3 Session honoring an optional profile (None: default resolution)."""
    if profile:
        return boto3.Session(profile_name=profile)
    return boto3.Session()
