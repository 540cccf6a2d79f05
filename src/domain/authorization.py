"""Ownership guard applied before any owner-only vehicle mutation."""

from __future__ import annotations

from typing import Protocol


class Owned(Protocol):
    owner: str


def authorize(caller: str, vehicle: Owned) -> bool:
    """True iff *caller* owns *vehicle*.  Pure function of its inputs."""
    return caller == vehicle.owner
