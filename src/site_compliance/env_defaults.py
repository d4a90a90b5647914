"""Fallback values for audit settings from `.env.defaults` and `.env`.

The process environment always wins. The files only fill keys that are not
exported, which is the usual case for local runs and bare CI jobs.
`.env.defaults` is the version-controlled catalog; `.env` is an optional,
partial local overlay.
"""
from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Dict, Iterator

ENV_FILES = (".env.defaults", ".env")
REPO_ROOT = Path(__file__).resolve().parents[2]


def _search_dirs() -> Iterator[Path]:
    yield REPO_ROOT
    try:
        cwd = Path.cwd().resolve()
    except OSError:
        # working directory was removed under us
        return
    if cwd != REPO_ROOT:
        yield cwd


@lru_cache(maxsize=1)
def load_defaults() -> Dict[str, str]:
    """All keys from every `.env*` file found, later files overriding earlier ones."""
    dirs = list(_search_dirs())
    merged: Dict[str, str] = {}
    for filename in ENV_FILES:
        for path in (directory / filename for directory in dirs):
            if path.is_file():
                merged.update(_parse_env_file(path))
    return merged


def env_value(key: str, fallback: str | None = None) -> str | None:
    """Environment variable, else the `.env*` default, else *fallback*."""
    value = os.getenv(key)
    if value:
        return value
    return load_defaults().get(key, fallback)


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "\"'":
        return value[1:-1]
    return value


def _parse_env_file(env_path: Path) -> Dict[str, str]:
    """KEY=VALUE lines; comments, blanks and an ``export`` prefix are tolerated."""
    values: Dict[str, str] = {}
    for raw in env_path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if line.startswith("export "):
            line = line[len("export "):].lstrip()
        key, sep, value = line.partition("=")
        if not sep or line.startswith("#"):
            continue
        values[key.strip()] = _unquote(value.strip())
    return values
