"""Application configuration.

AppConfig is a frozen dataclass — immutable after creation, IDE-autocompletable,
no string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = AppConfig(port=3000, background_task_poll_interval=1.0)
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    debug: bool = False
    # Applied to the wren loggers and to pounce by App.run()
    log_level: str = "info"

    # Background tasks: seconds between drain checks during shutdown
    background_task_poll_interval: float = 5.0

    # Cache
    cache_capacity: int = 10

    # Build http://{host}{target} URLs when the transport only has an
    # origin-form request target
    allow_url_fallback: bool = False
