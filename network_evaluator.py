"""
SmartCalc Network Evaluator
IPv4 CIDR and subnet arithmetic: host counts, masks, splitting, containment.
"""

import ipaddress
import math
import re
from dataclasses import dataclass
from typing import List, Optional

from calc_errors import DomainError
from domain_evaluators import NOT_MINE, Claimed, DomainEvaluator

IP = r"\d{1,3}\.\d{1,3}\.\d{1,3}\.\d{1,3}"
CIDR = IP + r"/\d{1,2}"

IP_PATTERN = re.compile(IP)
CIDR_PATTERN = re.compile(CIDR)
BARE_CIDR_PATTERN = re.compile(r"^(" + CIDR + r")$")

NETWORK_KEYWORDS = ("subnet", "cidr", "netmask", "wildcard", "broadcast", "split")

# Largest subnet list rendered for a split
MAX_SUBNETS = 1024


@dataclass(frozen=True)
class SubnetInfo:
    network_address: str
    prefix: int
    mask: str
    broadcast: str
    first_host: str
    last_host: str
    host_count: int

    @property
    def cidr(self) -> str:
        return f"{self.network_address}/{self.prefix}"


# =============================================================================
# ADDRESS ARITHMETIC
# =============================================================================

def _network(cidr):
    try:
        return ipaddress.IPv4Network(cidr, strict=False)
    except ValueError:
        raise DomainError(f"invalid CIDR: {cidr}") from None


def _address(ip):
    try:
        return ipaddress.IPv4Address(ip)
    except ValueError:
        raise DomainError(f"invalid IP: {ip}") from None


def _check_prefix(prefix):
    if prefix < 0 or prefix > 32:
        raise DomainError(f"invalid prefix: /{prefix}")


def hosts_in_prefix(prefix: int) -> int:
    _check_prefix(prefix)
    if prefix == 32:
        return 1
    if prefix == 31:
        return 2
    return 2 ** (32 - prefix) - 2


def _info(network):
    if network.prefixlen >= 31:
        first, last = network.network_address, network.broadcast_address
    else:
        first, last = network.network_address + 1, network.broadcast_address - 1
    return SubnetInfo(
        network_address=str(network.network_address),
        prefix=network.prefixlen,
        mask=str(network.netmask),
        broadcast=str(network.broadcast_address),
        first_host=str(first),
        last_host=str(last),
        host_count=hosts_in_prefix(network.prefixlen),
    )


def parse_cidr(cidr: str) -> SubnetInfo:
    """Subnet facts for a CIDR; host bits in the address are masked off."""
    return _info(_network(cidr))


def calculate_mask(prefix: int) -> str:
    _check_prefix(prefix)
    return str(ipaddress.IPv4Network(f"0.0.0.0/{prefix}").netmask)


def wildcard_mask(prefix: int) -> str:
    _check_prefix(prefix)
    return str(ipaddress.IPv4Network(f"0.0.0.0/{prefix}").hostmask)


def prefix_from_mask(mask: str) -> int:
    """Population count of a contiguous netmask."""
    value = int(_address(mask))
    prefix = bin(value).count("1")
    if value != (0xFFFFFFFF << (32 - prefix)) & 0xFFFFFFFF:
        raise DomainError(f"non-contiguous mask: {mask}")
    return prefix


def ip_in_range(ip: str, cidr: str) -> bool:
    return _address(ip) in _network(cidr)


def next_subnet(cidr: str) -> str:
    network = _network(cidr)
    start = int(network.network_address) + network.num_addresses
    if start > 0xFFFFFFFF:
        raise DomainError(f"no subnet after {network}")
    return f"{ipaddress.IPv4Address(start)}/{network.prefixlen}"


def _subnets(network, new_prefix, count):
    size = 2 ** (32 - new_prefix)
    base = int(network.network_address)
    return [
        _info(ipaddress.IPv4Network((base + i * size, new_prefix)))
        for i in range(count)
    ]


def split_to_subnets(cidr: str, count: int, limit: Optional[int] = None) -> List[SubnetInfo]:
    """
    Split a network into count equal, aligned subnets.

    Args:
        cidr (str): Network to split, e.g. "10.0.0.0/24"
        count (int): Number of subnets wanted
        limit (int, optional): Stop after this many subnets

    Returns:
        list[SubnetInfo]: the first count subnets of the smallest prefix that fits
    """
    network = _network(cidr)
    if count < 1:
        raise DomainError("subnet count must be at least 1")
    new_prefix = network.prefixlen + math.ceil(math.log2(count))
    if new_prefix > 32:
        raise DomainError(f"cannot split /{network.prefixlen} into {count} subnets")
    if limit is not None:
        count = min(count, limit)
    return _subnets(network, new_prefix, count)


def _host_split_prefix(network, hosts):
    host_bits = max(2, math.ceil(math.log2(hosts + 2)))
    new_prefix = 32 - host_bits
    if new_prefix < network.prefixlen:
        raise DomainError(f"cannot fit {hosts} hosts in /{network.prefixlen} network")
    return new_prefix


def host_split_count(cidr: str, hosts: int) -> int:
    """Number of subnets a host-count split produces."""
    network = _network(cidr)
    return 2 ** (_host_split_prefix(network, hosts) - network.prefixlen)


def split_by_host_count(cidr: str, hosts: int, limit: Optional[int] = None) -> List[SubnetInfo]:
    """Split a network into the smallest subnets that each hold hosts usable addresses."""
    network = _network(cidr)
    new_prefix = _host_split_prefix(network, hosts)
    count = 2 ** (new_prefix - network.prefixlen)
    if limit is not None:
        count = min(count, limit)
    return _subnets(network, new_prefix, count)


def format_subnet_info(info: SubnetInfo) -> str:
    return "\n".join([
        f"Network: {info.cidr}",
        f"Mask: {info.mask}",
        f"Hosts: {info.host_count}",
        f"Range: {info.first_host} - {info.last_host}",
        f"Broadcast: {info.broadcast}",
    ])


def format_subnet_list(subnets: List[SubnetInfo], total: Optional[int] = None) -> str:
    """One line per subnet; a shortened list ends with a count of the rest."""
    if not subnets:
        return "no subnets"
    lines = [f"{i}: {s.cidr} ({s.host_count} hosts)" for i, s in enumerate(subnets, 1)]
    if total is not None and total > len(subnets):
        lines.append(f"... {total - len(subnets)} more")
    return "\n".join(lines)


# =============================================================================
# HANDLERS
# =============================================================================

SPLIT_COUNT_PATTERNS = (
    re.compile(r"(?:split|divide)\s+(" + CIDR + r")\s+(?:to|into)\s+(\d+)\s+subnets?"),
    re.compile(r"^(" + CIDR + r")\s*/\s*(\d+)\s+subnets?$"),
)
SPLIT_HOSTS_PATTERNS = (
    re.compile(r"(?:split|divide)\s+(" + CIDR + r")\s+(?:to|into)\s+subnets?\s+(?:with|of)\s+(\d+)\s+hosts?"),
    re.compile(r"^(" + CIDR + r")\s*/\s*(\d+)\s+hosts?$"),
)
HOST_COUNT_CIDR = re.compile(r"(?:how\s+many\s+)?hosts?\s+(?:in|for|count)?\s*(" + CIDR + r")")
HOST_COUNT_PREFIX = re.compile(r"(?:how\s+many\s+)?hosts?\s+(?:in|for)?\s*/(\d{1,2})\b")
SUBNET_INFO = re.compile(r"(?:subnet\s+)?info\s+(?:for\s+)?(" + CIDR + r")")
WILDCARD = re.compile(r"wildcard\s+(?:mask\s+)?(?:for\s+)?/?(\d{1,2})\b")
MASK_FOR_PREFIX = re.compile(r"(?:subnet\s+)?(?:net)?mask\s+(?:for\s+)?/?(\d{1,2})\b")
PREFIX_FROM_MASK = re.compile(r"(?:prefix|cidr)\s+(?:for\s+)?(" + IP + r")")
IP_IN_RANGE = re.compile(r"is\s+(" + IP + r")\s+in\s+(" + CIDR + r")")
NEXT_SUBNET = re.compile(r"next\s+subnet\s+(?:after\s+)?(" + CIDR + r")")
BROADCAST = re.compile(r"broadcast\s+(?:for|of|address)?\s*(" + CIDR + r")")
NETWORK_ADDRESS = re.compile(r"network\s+(?:for|of|address)?\s*(" + CIDR + r")")


def _first_match(patterns, text):
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match
    return None


def handle_split_to_subnets(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = _first_match(SPLIT_COUNT_PATTERNS, expr_lower)
    if not match:
        return NOT_MINE
    count = int(match.group(2))
    subnets = split_to_subnets(match.group(1), count, limit=MAX_SUBNETS)
    return Claimed(format_subnet_list(subnets, total=count))


def handle_split_by_hosts(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = _first_match(SPLIT_HOSTS_PATTERNS, expr_lower)
    if not match:
        return NOT_MINE
    cidr, hosts = match.group(1), int(match.group(2))
    subnets = split_by_host_count(cidr, hosts, limit=MAX_SUBNETS)
    return Claimed(format_subnet_list(subnets, total=host_split_count(cidr, hosts)))


def handle_host_count(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = HOST_COUNT_CIDR.search(expr_lower)
    if match:
        return Claimed(f"{parse_cidr(match.group(1)).host_count} hosts")
    match = HOST_COUNT_PREFIX.search(expr_lower)
    if match:
        return Claimed(f"{hosts_in_prefix(int(match.group(1)))} hosts")
    return NOT_MINE


def handle_subnet_info(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = SUBNET_INFO.search(expr_lower)
    if not match:
        return NOT_MINE
    return Claimed(format_subnet_info(parse_cidr(match.group(1))))


def handle_wildcard_mask(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = WILDCARD.search(expr_lower)
    if not match:
        return NOT_MINE
    return Claimed(wildcard_mask(int(match.group(1))))


def handle_mask_for_prefix(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = MASK_FOR_PREFIX.search(expr_lower)
    if not match:
        return NOT_MINE
    return Claimed(calculate_mask(int(match.group(1))))


def handle_prefix_from_mask(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = PREFIX_FROM_MASK.search(expr_lower)
    if not match:
        return NOT_MINE
    return Claimed(f"/{prefix_from_mask(match.group(1))}")


def handle_ip_in_range(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = IP_IN_RANGE.search(expr_lower)
    if not match:
        return NOT_MINE
    return Claimed("yes" if ip_in_range(match.group(1), match.group(2)) else "no")


def handle_next_subnet(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = NEXT_SUBNET.search(expr_lower)
    if not match:
        return NOT_MINE
    return Claimed(next_subnet(match.group(1)))


def handle_broadcast(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = BROADCAST.search(expr_lower)
    if not match:
        return NOT_MINE
    return Claimed(parse_cidr(match.group(1)).broadcast)


def handle_network_address(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = NETWORK_ADDRESS.search(expr_lower)
    if not match:
        return NOT_MINE
    return Claimed(parse_cidr(match.group(1)).cidr)


def handle_bare_cidr(expr: str, expr_lower: str) -> Optional[Claimed]:
    match = BARE_CIDR_PATTERN.match(expr)
    if not match:
        return NOT_MINE
    return Claimed(format_subnet_info(parse_cidr(match.group(1))))


# Wildcard must run before the plain mask handler, which would also match it
NETWORK_HANDLERS = (
    handle_split_to_subnets,
    handle_split_by_hosts,
    handle_host_count,
    handle_subnet_info,
    handle_wildcard_mask,
    handle_mask_for_prefix,
    handle_prefix_from_mask,
    handle_ip_in_range,
    handle_next_subnet,
    handle_broadcast,
    handle_network_address,
    handle_bare_cidr,
)


def is_network_expression(expr: str) -> bool:
    """Cheap pre-filter for lines the network evaluator may understand."""
    lower = expr.lower()
    if CIDR_PATTERN.search(expr):
        return True
    if any(keyword in lower for keyword in NETWORK_KEYWORDS):
        return True
    if "hosts" in lower and (IP_PATTERN.search(expr) or re.search(r"/\d{1,2}", expr)):
        return True
    if "mask" in lower and "/" in lower:
        return True
    if ("prefix for" in lower or "cidr for" in lower) and IP_PATTERN.search(expr):
        return True
    return False


class NetworkEvaluator(DomainEvaluator):
    name = "network"

    def __init__(self):
        super().__init__(NETWORK_HANDLERS)

    def looks_like_mine(self, expr: str) -> bool:
        return is_network_expression(expr)
