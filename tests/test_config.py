import json
import uuid

import pytest

from oceandoc.config import BaseConfig, ConfigManager, ServerMeta


def _write_config(home, payload):
    conf = home / "conf"
    conf.mkdir(parents=True, exist_ok=True)
    path = conf / "server_base_config.json"
    path.write_text(payload if isinstance(payload, str) else json.dumps(payload))
    return path


def test_init_reads_grpc_port(tmp_path):
    path = _write_config(
        tmp_path, {"server_addr": "127.0.0.1", "grpc_server_port": 10001, "event_threads": 4}
    )
    manager = ConfigManager()
    manager.init(str(tmp_path), str(path))
    assert manager.grpc_server_port == 10001
    assert manager.udp_server_port == 10001
    assert manager.server_addr == "127.0.0.1"
    assert manager.event_threads == 4


def test_init_creates_server_meta(tmp_path):
    path = _write_config(tmp_path, {"grpc_server_port": 10001})
    manager = ConfigManager()
    manager.init(tmp_path, path)
    meta_file = tmp_path / "data" / "server_meta.json"
    assert meta_file.exists()
    stored = json.loads(meta_file.read_text())
    assert stored["server_uuid"] == manager.server_uuid
    assert str(uuid.UUID(manager.server_uuid)) == manager.server_uuid


def test_server_uuid_is_reused(tmp_path):
    path = _write_config(tmp_path, {"grpc_server_port": 10001})
    first = ConfigManager()
    first.init(tmp_path, path)
    second = ConfigManager()
    second.init(tmp_path, path)
    assert second.server_uuid == first.server_uuid


def test_corrupt_meta_is_regenerated(tmp_path):
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    (data_dir / "server_meta.json").write_text("{not json")
    manager = ConfigManager()
    generated = manager.generate_server_uuid(str(data_dir))
    assert generated == manager.server_uuid
    assert json.loads((data_dir / "server_meta.json").read_text())["server_uuid"] == generated


def test_missing_config_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigManager().init(tmp_path, tmp_path / "conf" / "missing.json")


def test_malformed_config_raises(tmp_path):
    path = _write_config(tmp_path, "{broken")
    with pytest.raises(ValueError):
        ConfigManager().init(tmp_path, path)


def test_wrong_field_type_raises():
    with pytest.raises(ValueError):
        BaseConfig.from_json('{"grpc_server_port": "abc"}')
    with pytest.raises(ValueError):
        BaseConfig.from_json('{"use_https": 1}')
    with pytest.raises(ValueError):
        BaseConfig.from_json('{"server_addr": 5}')


def test_negative_port_raises():
    with pytest.raises(ValueError):
        BaseConfig.from_json('{"grpc_server_port": -1}')


def test_top_level_must_be_object():
    with pytest.raises(ValueError):
        BaseConfig.from_json("[1, 2]")


def test_camel_case_and_unknown_fields():
    config = BaseConfig.from_json(
        '{"grpcServerPort": "10001", "useHttps": true, "unknownField": 3}'
    )
    assert config.grpc_server_port == 10001
    assert config.use_https is True


def test_to_json_prints_every_field(tmp_path):
    path = _write_config(tmp_path, {"grpc_server_port": 10001})
    manager = ConfigManager()
    manager.init(tmp_path, path)
    printed = json.loads(manager.to_json())
    assert printed["grpc_server_port"] == 10001
    assert printed["use_https"] is False
    assert printed["server_ssl_key"] == ""
    assert BaseConfig.from_json(manager.to_json()) == manager.base_config


def test_server_meta_round_trip():
    meta = ServerMeta(server_uuid="abc")
    assert ServerMeta.from_json(meta.to_json()) == meta


def test_receive_queue_timeout():
    assert ConfigManager().receive_queue_timeout == 5 * 60 * 1000


def test_instance_is_shared():
    first = ConfigManager.instance()
    second = ConfigManager.instance()
    assert id(second) == id(first)
    assert first.receive_queue_timeout == 5 * 60 * 1000