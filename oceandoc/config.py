"""Server configuration loaded from JSON, plus a persistent server identity."""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import asdict, dataclass, fields
from typing import Any, ClassVar, Dict, Mapping, Optional, Type, TypeVar, Union

from oceandoc.fsutil import exists, load_file, write_file
from oceandoc.textutil import new_uuid

__all__ = ["BaseConfig", "ConfigManager", "ServerMeta"]

_log = logging.getLogger(__name__)

_UINT32_MAX = (1 << 32) - 1

PathLike = Union[str, "os.PathLike[str]"]
_T = TypeVar("_T", bound="_JsonMessage")


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def _coerce_uint32(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"field {name!r} expects an integer, got {value!r}")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"field {name!r} expects an integer, got {value!r}")
        value = int(value)
    elif isinstance(value, str):
        try:
            value = int(value.strip())
        except ValueError as exc:
            raise ValueError(f"field {name!r} expects an integer, got {value!r}") from exc
    elif not isinstance(value, int):
        raise ValueError(f"field {name!r} expects an integer, got {value!r}")
    if not 0 <= value <= _UINT32_MAX:
        raise ValueError(f"field {name!r} out of uint32 range: {value}")
    return value


def _coerce(name: str, default: Any, value: Any) -> Any:
    if value is None:
        return default
    if isinstance(default, bool):
        if not isinstance(value, bool):
            raise ValueError(f"field {name!r} expects a boolean, got {value!r}")
        return value
    if isinstance(default, int):
        return _coerce_uint32(name, value)
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} expects a string, got {value!r}")
    return value


class _JsonMessage:
    """JSON mapping shared by the configuration records.

    Field names may be given as written or in lowerCamelCase; unknown fields
    are ignored. Output keeps field names and prints every field.
    """

    @classmethod
    def from_dict(cls: Type[_T], data: Mapping[str, Any]) -> _T:
        if not isinstance(data, Mapping):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")
        values: Dict[str, Any] = {}
        for f in fields(cls):  # type: ignore[arg-type]
            for key in (f.name, _camel(f.name)):
                if key in data:
                    values[f.name] = _coerce(f.name, f.default, data[key])
        return cls(**values)  # type: ignore[call-arg]

    @classmethod
    def from_json(cls: Type[_T], text: Union[str, bytes]) -> _T:
        """Parse JSON text; raises ``ValueError`` on malformed input."""
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)  # type: ignore[call-overload]

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))


@dataclass
class BaseConfig(_JsonMessage):
    """Settings of the server read from its base configuration file."""

    server_addr: str = ""
    grpc_server_port: int = 0
    http_server_port: int = 0
    metric_ratio: int = 0
    metric_interval_sec: int = 0
    discard_ratio: int = 0
    grpc_threads: int = 0
    event_threads: int = 0
    server_ssl_ca: str = ""
    server_ssl_cert: str = ""
    server_ssl_key: str = ""
    use_https: bool = False


@dataclass
class ServerMeta(_JsonMessage):
    """Identity of this server, kept across restarts."""

    server_uuid: str = ""


class ConfigManager:
    """Holds the loaded base configuration and the server's identity."""

    RECEIVE_QUEUE_TIMEOUT_MS: ClassVar[int] = 5 * 60 * 1000

    _shared: ClassVar[Optional["ConfigManager"]] = None
    _shared_lock: ClassVar[threading.Lock] = threading.Lock()

    def __init__(self) -> None:
        self.base_config = BaseConfig()
        self.server_meta = ServerMeta()

    @classmethod
    def instance(cls) -> "ConfigManager":
        """The process-wide manager, created on first use."""
        with cls._shared_lock:
            if cls._shared is None:
                cls._shared = cls()
            return cls._shared

    def init(self, home_dir: PathLike, base_config_path: PathLike) -> None:
        """Load the base configuration and set up the server identity.

        Raises ``OSError`` when the file cannot be read and ``ValueError``
        when it does not hold a valid configuration.
        """
        base_config_path = os.fspath(base_config_path)
        content = load_file(base_config_path)
        try:
            config = BaseConfig.from_json(content.decode("utf-8"))
        except (UnicodeDecodeError, ValueError) as exc:
            raise ValueError(
                f"parse base config error, path: {base_config_path}: {exc}"
            ) from exc
        self.base_config = config
        self.generate_server_uuid(f"{os.fspath(home_dir)}/data")
        _log.info("base config: %s", self.to_json())

    def generate_server_uuid(self, data_dir: PathLike) -> str:
        """Load the server UUID from ``data_dir``, creating and saving one if needed.

        Returns the UUID, or ``""`` when a new one could not be saved.
        """
        meta_path = f"{os.fspath(data_dir)}/server_meta.json"
        if exists(meta_path):
            try:
                self.server_meta = ServerMeta.from_json(
                    load_file(meta_path).decode("utf-8")
                )
                return self.server_meta.server_uuid
            except (OSError, UnicodeDecodeError, ValueError) as exc:
                _log.error("load meta error, path: %s: %s", meta_path, exc)

        self.server_meta = ServerMeta(server_uuid=new_uuid())
        try:
            write_file(meta_path, self.server_meta.to_json())
        except OSError as exc:
            _log.error("write meta config error: %s", exc)
            self.server_meta.server_uuid = ""
        return self.server_meta.server_uuid

    def to_json(self) -> str:
        """The base configuration as compact JSON with every field."""
        return self.base_config.to_json()

    @property
    def server_uuid(self) -> str:
        return self.server_meta.server_uuid

    @property
    def server_addr(self) -> str:
        return self.base_config.server_addr

    @property
    def grpc_server_port(self) -> int:
        return self.base_config.grpc_server_port

    @property
    def udp_server_port(self) -> int:
        """The UDP port, which shares the gRPC port number."""
        return self.base_config.grpc_server_port

    @property
    def http_server_port(self) -> int:
        return self.base_config.http_server_port

    @property
    def metric_ratio(self) -> int:
        return self.base_config.metric_ratio

    @property
    def metric_interval_sec(self) -> int:
        return self.base_config.metric_interval_sec

    @property
    def discard_ratio(self) -> int:
        return self.base_config.discard_ratio

    @property
    def grpc_threads(self) -> int:
        return self.base_config.grpc_threads

    @property
    def event_threads(self) -> int:
        return self.base_config.event_threads

    @property
    def receive_queue_timeout(self) -> int:
        """Receive queue timeout in milliseconds."""
        return self.RECEIVE_QUEUE_TIMEOUT_MS

    @property
    def ssl_ca(self) -> str:
        return self.base_config.server_ssl_ca

    @property
    def ssl_cert(self) -> str:
        return self.base_config.server_ssl_cert

    @property
    def ssl_key(self) -> str:
        return self.base_config.server_ssl_key

    @property
    def use_https(self) -> bool:
        return self.base_config.use_https