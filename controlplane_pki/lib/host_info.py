"""Host environment lookups."""

import socket
from typing import Protocol


class HostInfo(Protocol):
    """Provides facts about the local host."""

    def hostname(self) -> str: ...


class SocketHostInfo:
    """HostInfo backed by the operating system."""

    def hostname(self) -> str:
        return socket.gethostname()


class StaticHostInfo:
    """HostInfo returning a fixed hostname."""

    def __init__(self, hostname: str) -> None:
        self._hostname = hostname

    def hostname(self) -> str:
        return self._hostname
