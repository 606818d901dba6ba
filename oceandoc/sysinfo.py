"""Process and host information: descriptors, memory, addresses, environment."""

from __future__ import annotations

import ipaddress
import os
import socket
import sys
from typing import List, Optional, Union

import psutil

__all__ = [
    "env_lines",
    "executable_path",
    "fd_count",
    "get_env",
    "home_dir",
    "list_ip_addresses",
    "mem_usage_mb",
]

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


def fd_count() -> int:
    """Number of open file descriptors (handles on Windows) of this process."""
    process = psutil.Process()
    if hasattr(process, "num_fds"):
        return process.num_fds()
    return process.num_handles()


def mem_usage_mb() -> int:
    """Resident memory of this process in whole MiB."""
    return psutil.Process().memory_info().rss // 1024 // 1024


def list_ip_addresses() -> List[IPAddress]:
    """Every IPv4 and IPv6 address bound to a local interface."""
    found: List[IPAddress] = []
    for addrs in psutil.net_if_addrs().values():
        for addr in addrs:
            if addr.family not in (socket.AF_INET, socket.AF_INET6):
                continue
            text = addr.address.split("%", 1)[0]
            try:
                found.append(ipaddress.ip_address(text))
            except ValueError:
                continue
    return found


def executable_path() -> str:
    """Absolute path of the running interpreter's executable, or ``""``."""
    try:
        return psutil.Process().exe()
    except (psutil.Error, OSError):
        return os.path.realpath(sys.executable) if sys.executable else ""


def home_dir() -> str:
    """The working directory; from ``/`` it is two levels above the executable."""
    current = os.getcwd()
    if current == "/":
        return os.path.dirname(os.path.dirname(executable_path()))
    return current


def get_env(name: str) -> Optional[str]:
    """Value of environment variable ``name``, or ``None`` if unset."""
    return os.environ.get(name)


def env_lines() -> List[str]:
    """The environment as ``NAME=value`` lines."""
    return [f"{key}={value}" for key, value in os.environ.items()]