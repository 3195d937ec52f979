"""Server configuration loaded from, and saved back to, a YAML file."""

import dataclasses
import os
import posixpath
import typing
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

_SKIP = "-"


def _yaml(name: str) -> dict:
    return {"yaml": name}


@dataclass
class ClusterNode:
    ip: str = ""
    port: int = 0


@dataclass
class CronJob:
    sync_logic_schema: str = field(default="", metadata=_yaml("sync_logic_schema"))


@dataclass
class ServerConfig:
    bind: str = ""
    ip: str = ""
    port: int = 8808
    https: bool = False
    cert_file: str = field(default="", metadata=_yaml("certfile"))
    key_file: str = field(default="", metadata=_yaml("keyfile"))
    pprof: bool = True
    session_timeout: int = field(default=3600, metadata=_yaml("session_timeout"))
    swagger_enable: bool = field(default=False, metadata=_yaml("swagger_enable"))
    public_key: str = field(default="", metadata=_yaml("public_key"))
    persistent_policy: str = field(default="local", metadata=_yaml("persistent_policy"))
    task_interval: int = field(default=5, metadata=_yaml("task_interval"))


@dataclass
class LogConfig:
    level: str = "INFO"
    max_count: int = field(default=5, metadata=_yaml("max_count"))
    max_size: int = field(default=10, metadata=_yaml("max_size"))
    max_age: int = field(default=10, metadata=_yaml("max_age"))


@dataclass
class NacosConfig:
    enabled: bool = False
    hosts: list[str] = field(default_factory=list)
    port: int = 0
    user_name: str = field(default="", metadata=_yaml("user_name"))
    password: str = ""
    namespace: str = ""
    group: str = "DEFAULT_GROUP"
    data_id: str = field(default="ckman", metadata=_yaml("data_id"))


def _key(f: dataclasses.Field) -> str:
    return f.metadata.get("yaml", f.name)


def _decode(hint: Any, raw: Any, current: Any, where: str) -> Any:
    origin = typing.get_origin(hint)
    if dataclasses.is_dataclass(hint):
        if raw is None:
            return current
        if not isinstance(raw, dict):
            raise ValueError(f"{where}: expected a mapping")
        _merge(current, raw, where)
        return current
    if hint is bool:
        if raw is None:
            return current
        if not isinstance(raw, bool):
            raise ValueError(f"{where}: expected a boolean, got {raw!r}")
        return raw
    if hint is int:
        if raw is None:
            return current
        if isinstance(raw, bool) or not isinstance(raw, int):
            raise ValueError(f"{where}: expected an integer, got {raw!r}")
        return raw
    if hint is str:
        if raw is None:
            return current
        if isinstance(raw, bool):
            return "true" if raw else "false"
        if isinstance(raw, (str, int, float)):
            return str(raw)
        raise ValueError(f"{where}: expected a string, got {raw!r}")
    if origin is list:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise ValueError(f"{where}: expected a list")
        (elem,) = typing.get_args(hint)
        return [_decode(elem, item, None, f"{where}[{i}]") for i, item in enumerate(raw)]
    if origin is dict:
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f"{where}: expected a mapping")
        _, value_hint = typing.get_args(hint)
        result = dict(current or {})
        for key, value in raw.items():
            if typing.get_origin(value_hint) is dict and value is not None and not isinstance(value, dict):
                raise ValueError(f"{where}.{key}: expected a mapping")
            result[str(key)] = value
        return result
    return raw


def _merge(obj: Any, raw: dict, where: str) -> None:
    for f in dataclasses.fields(obj):
        key = _key(f)
        if key == _SKIP or key not in raw:
            continue
        path = f"{where}.{key}" if where else key
        setattr(obj, f.name, _decode(f.type, raw[key], getattr(obj, f.name), path))


def _encode(value: Any) -> Any:
    if dataclasses.is_dataclass(value):
        return {
            _key(f): _encode(getattr(value, f.name))
            for f in dataclasses.fields(value)
            if _key(f) != _SKIP
        }
    if isinstance(value, dict):
        return {k: _encode(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_encode(item) for item in value]
    return value


@dataclass
class CKManConfig:
    config_file: str = field(default="", metadata=_yaml(_SKIP))
    server: ServerConfig = field(default_factory=ServerConfig)
    log: LogConfig = field(default_factory=LogConfig)
    persistent_config: dict[str, dict[str, Any]] = field(
        default_factory=dict, metadata=_yaml("persistent_config")
    )
    nacos: NacosConfig = field(default_factory=NacosConfig)
    cron: CronJob = field(default_factory=CronJob)
    version: str = field(default="", metadata=_yaml(_SKIP))

    def work_directory(self) -> str:
        """Parent of the directory holding the configuration file."""
        conf_dir = os.path.abspath(os.path.dirname(self.config_file))
        return os.path.dirname(conf_dir).replace("\\", "/")

    def save(self) -> None:
        """Write the configuration back to ``config_file`` as YAML."""
        text = yaml.safe_dump(_encode(self), sort_keys=False, allow_unicode=True)
        with open(self.config_file, "w", encoding="utf-8") as handle:
            handle.write(text)

    def cluster_peers(self, nodes: Optional[list]) -> list:
        """Nodes whose address and port both differ from this server's."""
        return [
            node
            for node in nodes or ()
            if self.server.ip != node.ip and self.server.port != node.port
        ]


def parse_config_file(path: str, version: str) -> CKManConfig:
    """Read the YAML file at ``path`` over the built-in defaults."""
    with open(path, encoding="utf-8") as handle:
        text = handle.read()
    config = CKManConfig(config_file=path, version=version)
    work_dir = config.work_directory()
    config.server.cert_file = posixpath.join(work_dir, "conf", "server.crt")
    config.server.key_file = posixpath.join(work_dir, "conf", "server.key")
    try:
        raw = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"invalid configuration file {path}: {exc}") from exc
    if raw is None:
        return config
    if not isinstance(raw, dict):
        raise ValueError(f"invalid configuration file {path}: expected a mapping")
    _merge(config, raw, "")
    return config