import pytest
import yaml

from ckman.settings import (
    CKManConfig,
    ClusterNode,
    ServerConfig,
    parse_config_file,
)


def _write(tmp_path, text):
    conf = tmp_path / "conf"
    conf.mkdir(exist_ok=True)
    path = conf / "ckman.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def _root(tmp_path):
    return str(tmp_path).replace("\\", "/")


def test_defaults_applied_for_empty_file(tmp_path):
    path = _write(tmp_path, "")
    config = parse_config_file(path, "v1")
    assert config.server.port == 8808
    assert config.server.session_timeout == 3600
    assert config.server.pprof is True
    assert config.server.persistent_policy == "local"
    assert config.log.level == "INFO"
    assert config.nacos.group == "DEFAULT_GROUP"
    assert config.nacos.data_id == "ckman"


def test_cert_and_key_paths_follow_work_directory(tmp_path):
    config = parse_config_file(_write(tmp_path, "{}"), "v1")
    assert config.work_directory() == _root(tmp_path)
    assert config.server.cert_file == _root(tmp_path) + "/conf/server.crt"
    assert config.server.key_file == _root(tmp_path) + "/conf/server.key"


def test_version_and_path_recorded(tmp_path):
    path = _write(tmp_path, "")
    config = parse_config_file(path, "v2.0.0")
    assert config.version == "v2.0.0"
    assert config.config_file == path


def test_values_override_defaults(tmp_path):
    text = (
        "server:\n"
        "  port: 9000\n"
        "  swagger_enable: true\n"
        "  ip: 10.0.0.1\n"
        "log:\n"
        "  max_count: 7\n"
        "nacos:\n"
        "  hosts: [a, b]\n"
        "  data_id: other\n"
        "cron:\n"
        "  sync_logic_schema: '* * * * *'\n"
    )
    config = parse_config_file(_write(tmp_path, text), "v1")
    assert config.server.port == 9000
    assert config.server.swagger_enable is True
    assert config.server.ip == "10.0.0.1"
    assert config.server.session_timeout == 3600
    assert config.log.max_count == 7
    assert config.log.level == "INFO"
    assert config.nacos.hosts == ["a", "b"]
    assert config.nacos.data_id == "other"
    assert config.nacos.group == "DEFAULT_GROUP"
    assert config.cron.sync_logic_schema == "* * * * *"


def test_persistent_config_mapping(tmp_path):
    text = "persistent_config:\n  mysql:\n    host: db\n    port: 3306\n"
    config = parse_config_file(_write(tmp_path, text), "v1")
    assert config.persistent_config == {"mysql": {"host": "db", "port": 3306}}


def test_null_list_resets_to_empty(tmp_path):
    config = parse_config_file(_write(tmp_path, "nacos:\n  hosts: null\n"), "v1")
    assert config.nacos.hosts == []


def test_wrong_type_raises(tmp_path):
    with pytest.raises(ValueError):
        parse_config_file(_write(tmp_path, "server:\n  port: abc\n"), "v1")


def test_non_mapping_document_raises(tmp_path):
    with pytest.raises(ValueError):
        parse_config_file(_write(tmp_path, "- a\n- b\n"), "v1")


def test_missing_file_raises(tmp_path):
    with pytest.raises(FileNotFoundError):
        parse_config_file(str(tmp_path / "missing.yaml"), "v1")


def test_save_round_trip(tmp_path):
    path = _write(tmp_path, "server:\n  port: 9000\n")
    config = parse_config_file(path, "v1")
    config.log.level = "DEBUG"
    config.nacos.hosts = ["h1"]
    config.persistent_config = {"local": {"format": "json"}}
    config.save()
    reloaded = parse_config_file(path, "v1")
    assert reloaded == config


def test_saved_file_omits_runtime_fields(tmp_path):
    path = _write(tmp_path, "")
    config = parse_config_file(path, "v1")
    config.save()
    with open(path, encoding="utf-8") as handle:
        data = yaml.safe_load(handle)
    assert set(data) == {"server", "log", "persistent_config", "nacos", "cron"}
    assert data["server"]["port"] == 8808
    assert "certfile" in data["server"]


def test_cluster_peers_filters_on_ip_and_port():
    config = CKManConfig(server=ServerConfig(ip="10.0.0.1", port=8808))
    same_ip = ClusterNode(ip="10.0.0.1", port=9000)
    same_port = ClusterNode(ip="10.0.0.2", port=8808)
    other = ClusterNode(ip="10.0.0.3", port=9000)
    assert config.cluster_peers([same_ip, same_port, other]) == [other]
    assert config.cluster_peers(None) == []