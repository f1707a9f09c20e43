"""Client that runs commands on a device and parses their XML output."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any, Protocol, TypeVar

from .xmlutil import parse_xml

log = logging.getLogger(__name__)

T = TypeVar("T")


class Connection(Protocol):
    """A session on a device that can run CLI commands."""

    host: str
    device: Any

    def run_command(self, cmd: str) -> bytes:
        """Run cmd on the device and return its raw output."""
        ...


class Client:
    """Sends commands to a device and parses the XML results."""

    def __init__(
        self,
        connection: Connection,
        debug: bool = False,
        satellite: bool = False,
        license: bool = False,
    ) -> None:
        self._connection = connection
        self._debug = debug
        self._satellite = satellite
        self._license = license

    def run_command_and_parse(
        self, cmd: str, parser: Callable[[bytes], T] = parse_xml
    ) -> T:
        """Run cmd with XML output and return what parser makes of it."""
        if self._debug:
            log.info("Running command on %s: %s", self._connection.host, cmd)
        output = self._connection.run_command(f"{cmd} | display xml")
        if isinstance(output, str):
            output = output.encode()
        if self._debug:
            log.info(
                "Output for %s: %s",
                self._connection.host,
                output.decode("utf-8", errors="replace"),
            )
        return parser(output)

    def device(self) -> Any:
        """Return information on the connected device."""
        return self._connection.device

    def is_satellite_enabled(self) -> bool:
        """Tell whether satellite features are scraped."""
        return self._satellite

    def is_scraping_license_enabled(self) -> bool:
        """Tell whether license information is scraped."""
        return self._license