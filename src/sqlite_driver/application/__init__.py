"""Application layer - the driver entry point and its wiring."""

from sqlite_driver.application.bootstrap import build_container, open_driver
from sqlite_driver.application.connection_registry import (
    ConnectionRegistry,
    get_connection_registry,
    reset_connection_registry,
)
from sqlite_driver.application.database_driver import DatabaseDriver

__all__ = [
    "ConnectionRegistry",
    "DatabaseDriver",
    "build_container",
    "get_connection_registry",
    "open_driver",
    "reset_connection_registry",
]
