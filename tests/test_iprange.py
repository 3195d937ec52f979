import pytest

from ckman.iprange import inet_aton, inet_ntoa, parse_hosts, parse_ip_range


def test_parse_ip_range_cases():
    assert parse_ip_range("192.168.1.15-192.168.1.22") == [
        "192.168.1.15", "192.168.1.16", "192.168.1.17", "192.168.1.18",
        "192.168.1.19", "192.168.1.20", "192.168.1.21", "192.168.1.22",
    ]
    assert parse_ip_range("192.168.21.146") == ["192.168.21.146"]
    assert parse_ip_range("192.168.1.0/31") == ["192.168.1.0", "192.168.1.1"]


def test_cidr_masks_host_bits():
    assert parse_ip_range("192.168.1.1/31") == ["192.168.1.0", "192.168.1.1"]
    assert len(parse_ip_range("10.0.0.0/24")) == 256


def test_parse_hosts_concatenates():
    assert parse_hosts(["192.168.21.146", "192.168.1.0/31"]) == [
        "192.168.21.146", "192.168.1.0", "192.168.1.1",
    ]


def test_reversed_range_rejected():
    with pytest.raises(ValueError):
        parse_ip_range("192.168.1.22-192.168.1.15")


def test_invalid_range_entries():
    with pytest.raises(ValueError):
        parse_ip_range("192.168.1.1-192.168.1.2-192.168.1.3")
    with pytest.raises(ValueError):
        parse_ip_range("abc-192.168.1.2")
    with pytest.raises(ValueError):
        parse_hosts(["192.168.1.1", "1.2.3/99"])


@pytest.mark.parametrize("ip", ["0.0.0.0", "192.168.1.15", "255.255.255.255"])
def test_aton_ntoa_round_trip(ip):
    assert inet_ntoa(inet_aton(ip)) == ip


def test_aton_rejects_ipv6():
    with pytest.raises(ValueError):
        inet_aton("fe80::1")


def test_ntoa_out_of_range():
    with pytest.raises(ValueError):
        inet_ntoa(0x100000000)