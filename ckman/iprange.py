"""Expansion of host lists written as single addresses, ranges or CIDR blocks."""

from __future__ import annotations

import ipaddress
from collections.abc import Iterable

_MAX_IPV4 = 0xFFFFFFFF


def parse_hosts(hosts: Iterable[str]) -> list[str]:
    """Expand every entry of ``hosts`` and concatenate the results."""
    result: list[str] = []
    for host in hosts:
        result.extend(parse_ip_range(host))
    return result


def parse_ip_range(text: str) -> list[str]:
    """Expand ``a-b`` ranges and ``net/len`` blocks; other text is returned as is."""
    if "-" in text:
        return _range(text)
    if "/" in text:
        return _cidr(text)
    return [text]


def inet_aton(ip: str) -> int:
    """Convert a dotted IPv4 address to an integer."""
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        raise ValueError("invalid ipv4 format") from None
    if isinstance(addr, ipaddress.IPv6Address):
        if addr.ipv4_mapped is None:
            raise ValueError("invalid ipv4 format")
        addr = addr.ipv4_mapped
    return int(addr)


def inet_ntoa(number: int) -> str:
    """Convert an integer to a dotted IPv4 address."""
    if number < 0 or number > _MAX_IPV4:
        raise ValueError("beyond the scope of ipv4")
    return str(ipaddress.IPv4Address(number))


def _range(text: str) -> list[str]:
    parts = text.split("-")
    if len(parts) != 2:
        raise ValueError("invaild ip range")
    begin = inet_aton(parts[0])
    end = inet_aton(parts[1])
    if begin > end:
        raise ValueError(f"invalid ip range: {text}")
    return [inet_ntoa(number) for number in range(begin, end + 1)]


def _cidr(text: str) -> list[str]:
    try:
        network = ipaddress.ip_network(text, strict=False)
    except ValueError as exc:
        raise ValueError(f"invalid CIDR address: {text}") from exc
    return [str(addr) for addr in network]