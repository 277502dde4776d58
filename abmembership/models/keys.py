"""Stored user keys.

A user's state is a flat mapping of string keys. Three shapes are recognised:

* ``"<name>"``                -- assignment to experiment ``name``
* ``"<name>:<version>"``      -- assignment to a specific version of ``name``
* ``"<name>[:<version>]:finished"`` -- the user finished ``name``

Keys are parsed once into one of the dataclasses below so the cleanup rules
never have to re-inspect raw strings.
"""

import re
from dataclasses import dataclass
from typing import Optional, Union

FINISHED_SUFFIX = ":finished"

_VERSIONED_RE = re.compile(r"^(?P<name>.+):(?P<version>\d+)$")


@dataclass(frozen=True)
class CurrentKey:
    raw: str
    name: str

    version = None


@dataclass(frozen=True)
class VersionedKey:
    raw: str
    name: str
    version: int


@dataclass(frozen=True)
class FinishedKey:
    raw: str
    name: str
    version: Optional[int] = None


AssignmentKey = Union[CurrentKey, VersionedKey, FinishedKey]


def parse_key(raw: str) -> AssignmentKey:
    if raw.endswith(FINISHED_SUFFIX) and len(raw) > len(FINISHED_SUFFIX):
        inner = parse_key(raw[: -len(FINISHED_SUFFIX)])
        return FinishedKey(raw=raw, name=inner.name, version=inner.version)

    match = _VERSIONED_RE.match(raw)
    if match:
        return VersionedKey(raw=raw, name=match.group("name"), version=int(match.group("version")))

    return CurrentKey(raw=raw, name=raw)


def base_name(raw: str) -> str:
    """Experiment name a key belongs to, without version or finished suffix."""
    return parse_key(raw).name


def finished_key(experiment_key: str) -> str:
    return f"{experiment_key}{FINISHED_SUFFIX}"
