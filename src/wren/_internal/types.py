"""Shared type aliases used across wren modules."""

from collections.abc import Awaitable, Callable
from typing import TypeAlias

# Background job: zero-argument callable, sync or async
Job: TypeAlias = Callable[[], Awaitable[None] | None]

