"""
Tests for CIDR and subnet calculations.
"""

import pytest

from calc_errors import DomainError
from domain_evaluators import ReferenceTable
from network_evaluator import (
    NetworkEvaluator, calculate_mask, hosts_in_prefix, ip_in_range, is_network_expression,
    host_split_count, next_subnet, parse_cidr, prefix_from_mask, split_by_host_count,
    split_to_subnets,
    wildcard_mask,
)


def network(expr):
    result = NetworkEvaluator().evaluate(expr, ReferenceTable())
    return None if result is None else result.text


def test_hosts_in_prefix():
    test_cases = [(0, 4294967294), (16, 65534), (24, 254), (30, 2), (31, 2), (32, 1)]

    for prefix, expected in test_cases:
        assert hosts_in_prefix(prefix) == expected, f"Failed: /{prefix}"

    with pytest.raises(DomainError):
        hosts_in_prefix(33)


def test_masks():
    assert calculate_mask(0) == "0.0.0.0"
    assert calculate_mask(20) == "255.255.240.0"
    assert calculate_mask(24) == "255.255.255.0"
    assert calculate_mask(32) == "255.255.255.255"
    assert wildcard_mask(24) == "0.0.0.255"


@pytest.mark.parametrize("prefix", range(33))
def test_prefix_from_mask_inverts_calculate_mask(prefix):
    assert prefix_from_mask(calculate_mask(prefix)) == prefix


def test_prefix_from_mask_rejects_non_contiguous():
    with pytest.raises(DomainError):
        prefix_from_mask("255.0.255.0")


def test_parse_cidr_masks_host_bits():
    info = parse_cidr("192.168.1.77/24")
    assert info.network_address == "192.168.1.0"
    assert info.cidr == "192.168.1.0/24"
    assert info.broadcast == "192.168.1.255"
    assert info.first_host == "192.168.1.1"
    assert info.last_host == "192.168.1.254"
    assert info.host_count == 254


def test_point_to_point_ranges():
    info = parse_cidr("10.0.0.0/31")
    assert (info.first_host, info.last_host) == ("10.0.0.0", "10.0.0.1")
    info = parse_cidr("10.0.0.7/32")
    assert (info.first_host, info.last_host, info.host_count) == ("10.0.0.7", "10.0.0.7", 1)


def test_ip_in_range():
    assert ip_in_range("10.0.0.5", "10.0.0.0/24")
    assert not ip_in_range("10.0.1.5", "10.0.0.0/24")


def test_next_subnet():
    assert next_subnet("10.0.0.0/24") == "10.0.1.0/24"
    assert next_subnet("10.0.255.0/24") == "10.1.0.0/24"
    with pytest.raises(DomainError):
        next_subnet("255.255.255.0/24")


def test_split_to_subnets():
    """Test equal splits, including counts that are not powers of two"""
    subnets = split_to_subnets("10.100.0.0/16", 4)
    assert [s.cidr for s in subnets] == [
        "10.100.0.0/18", "10.100.64.0/18", "10.100.128.0/18", "10.100.192.0/18",
    ]
    assert all(s.host_count == 16382 for s in subnets)

    subnets = split_to_subnets("10.0.0.0/24", 3)
    assert [s.cidr for s in subnets] == ["10.0.0.0/26", "10.0.0.64/26", "10.0.0.128/26"]

    with pytest.raises(DomainError):
        split_to_subnets("10.0.0.0/31", 4)


def test_split_by_host_count():
    subnets = split_by_host_count("10.0.0.0/24", 100)
    assert [s.cidr for s in subnets] == ["10.0.0.0/25", "10.0.0.128/25"]
    assert subnets[0].host_count == 126

    with pytest.raises(DomainError):
        split_by_host_count("10.0.0.0/24", 1000)


def test_large_splits_are_truncated():
    """Large splits are computed in full but only the first subnets are listed"""
    subnets = split_to_subnets("10.0.0.0/8", 2000)
    assert len(subnets) == 2000
    assert subnets[-1].cidr == "10.249.224.0/19"
    assert len(split_to_subnets("10.0.0.0/8", 2000, limit=10)) == 10
    assert host_split_count("10.0.0.0/8", 2) == 4194304

    lines = network("split 10.0.0.0/8 into 2000 subnets").split("\n")
    assert len(lines) == 1025
    assert lines[0] == "1: 10.0.0.0/19 (8190 hosts)"
    assert lines[1023] == "1024: 10.127.224.0/19 (8190 hosts)"
    assert lines[-1] == "... 976 more"

    lines = network("split 10.0.0.0/8 into subnets with 2 hosts").split("\n")
    assert len(lines) == 1025
    assert lines[0] == "1: 10.0.0.0/30 (2 hosts)"
    assert lines[-1] == "... 4193280 more"


def test_bare_cidr_info():
    assert network("10.100.0.0/24") == "\n".join([
        "Network: 10.100.0.0/24",
        "Mask: 255.255.255.0",
        "Hosts: 254",
        "Range: 10.100.0.1 - 10.100.0.254",
        "Broadcast: 10.100.0.255",
    ])


def test_phrases():
    """Test the natural-language network phrases"""
    test_cases = [
        ("hosts in /24", "254 hosts"),
        ("how many hosts in 10.0.0.0/22", "1022 hosts"),
        ("mask for /24", "255.255.255.0"),
        ("wildcard mask for /24", "0.0.0.255"),
        ("prefix for 255.255.255.0", "/24"),
        ("is 10.0.0.5 in 10.0.0.0/24", "yes"),
        ("is 10.0.1.5 in 10.0.0.0/24", "no"),
        ("next subnet after 10.0.0.0/24", "10.0.1.0/24"),
        ("broadcast for 192.168.1.0/24", "192.168.1.255"),
        ("network address 192.168.1.77/24", "192.168.1.0/24"),
        ("split 10.0.0.0/24 into 2 subnets", "1: 10.0.0.0/25 (126 hosts)\n2: 10.0.0.128/25 (126 hosts)"),
        ("10.0.0.0/24 / 2 subnets", "1: 10.0.0.0/25 (126 hosts)\n2: 10.0.0.128/25 (126 hosts)"),
        ("10.0.0.0/24 / 100 hosts", "1: 10.0.0.0/25 (126 hosts)\n2: 10.0.0.128/25 (126 hosts)"),
    ]

    for expr, expected in test_cases:
        assert network(expr) == expected, f"Failed: {expr}"

    assert network("subnet info for 10.0.0.0/30").startswith("Network: 10.0.0.0/30\n")


def test_invalid_cidr_raises():
    with pytest.raises(DomainError):
        network("10.0.0.0/33")


def test_prefilter():
    assert is_network_expression("10.0.0.0/8")
    assert is_network_expression("hosts in /24")
    assert is_network_expression("wildcard mask for /24")
    assert not is_network_expression("2 + 3")
    assert not is_network_expression("100 / 4")
