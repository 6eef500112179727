import socket
from unittest import mock

import pytest

from ssrkit.netutils import (
    INET6_SIZE,
    INET_SIZE,
    ResolveError,
    SocketAddress,
    bind_to_address,
    get_sockaddr,
    set_interface,
    set_reuseport,
    sockaddr_cmp,
    sockaddr_cmp_addr,
    validate_hostname,
)


def _info(family, sockaddr):
    return (family, socket.SOCK_STREAM, socket.IPPROTO_TCP, "", sockaddr)


@pytest.mark.parametrize(
    "name",
    ["example.com", "a", "my_host-1.example.org", "example.com.", "x" * 63 + ".com"],
)
def test_valid_hostnames(name):
    assert validate_hostname(name) is True


@pytest.mark.parametrize(
    "name",
    [
        None,
        "",
        ".example.com",
        "a..b",
        "-bad.com",
        "bad-.com",
        "x" * 64 + ".com",
        "sp ace.com",
        "h\u00e9llo.com",
        "a" * 256,
        "a..",
    ],
)
def test_invalid_hostnames(name):
    assert validate_hostname(name) is False


def test_validate_hostname_accepts_bytes():
    assert validate_hostname(b"example.com") is True
    assert validate_hostname(b"\xff.com") is False


def test_ipv4_literal_round_trip():
    addr = get_sockaddr("192.0.2.7", "8388")
    assert addr.family == socket.AF_INET
    assert len(addr.address) == INET_SIZE
    assert addr.to_tuple() == ("192.0.2.7", 8388)


def test_ipv6_literal_round_trip():
    addr = get_sockaddr("2001:db8::1", "443")
    assert addr.family == socket.AF_INET6
    assert len(addr.address) == INET6_SIZE
    assert addr.to_tuple() == ("2001:db8::1", 443, 0, 0)


def test_literal_without_port_has_port_zero():
    assert get_sockaddr("192.0.2.7").port == 0


def test_from_tuple_matches_literal():
    addr = SocketAddress.from_tuple(socket.AF_INET, ("198.51.100.3", 53))
    assert addr == get_sockaddr("198.51.100.3", 53)
    assert addr.host == "198.51.100.3"


def test_socket_address_rejects_bad_size_and_port():
    with pytest.raises(ValueError):
        SocketAddress(socket.AF_INET, b"\x00" * INET6_SIZE, 1)
    with pytest.raises(ValueError):
        SocketAddress(socket.AF_INET, b"\x00" * INET_SIZE, 70000)


def test_cmp_orders_by_port_then_address():
    a = get_sockaddr("10.0.0.1", "80")
    b = get_sockaddr("10.0.0.1", "81")
    c = get_sockaddr("10.0.0.2", "80")
    assert sockaddr_cmp(a, b) == -1
    assert sockaddr_cmp(b, a) == 1
    assert sockaddr_cmp(a, a) == 0
    assert sockaddr_cmp(a, c) == -1
    assert sockaddr_cmp_addr(a, b) == 0
    assert sockaddr_cmp_addr(c, b) == 1


def test_cmp_orders_by_family_first():
    v4 = get_sockaddr("255.255.255.255", "65535")
    v6 = get_sockaddr("::", "0")
    expected = (int(socket.AF_INET) > int(socket.AF_INET6)) - (
        int(socket.AF_INET) < int(socket.AF_INET6)
    )
    assert sockaddr_cmp(v4, v6) == expected
    assert sockaddr_cmp(v6, v4) == -expected
    assert sockaddr_cmp_addr(v4, v6) == expected


def test_resolution_prefers_requested_family():
    results = [
        _info(socket.AF_INET, ("192.0.2.1", 80)),
        _info(socket.AF_INET6, ("2001:db8::1", 80, 0, 0)),
    ]
    with mock.patch("socket.getaddrinfo", return_value=results):
        v6 = get_sockaddr("host.example.com", "80", ipv6first=True)
        v4 = get_sockaddr("host.example.com", "80")
    assert v6.to_tuple() == ("2001:db8::1", 80, 0, 0)
    assert v4.to_tuple() == ("192.0.2.1", 80)


def test_resolution_falls_back_to_first_result():
    results = [_info(socket.AF_INET6, ("2001:db8::2", 443, 0, 0))]
    with mock.patch("socket.getaddrinfo", return_value=results):
        addr = get_sockaddr("host.example.com", "443")
    assert addr.family == socket.AF_INET6
    assert addr.host == "2001:db8::2"


def test_resolution_with_no_results_raises():
    with mock.patch("socket.getaddrinfo", return_value=[]):
        with pytest.raises(ResolveError):
            get_sockaddr("host.example.com", "80")


def test_non_blocking_failure_tries_once():
    failure = socket.gaierror(socket.EAI_NONAME, "not found")
    with mock.patch("socket.getaddrinfo", side_effect=failure) as lookup, \
            mock.patch("time.sleep") as sleep:
        with pytest.raises(ResolveError):
            get_sockaddr("missing.example.com", "80")
    assert lookup.call_count == 1
    assert sleep.call_count == 0


def test_blocking_failure_retries_with_backoff():
    failure = socket.gaierror(socket.EAI_NONAME, "not found")
    with mock.patch("socket.getaddrinfo", side_effect=failure) as lookup, \
            mock.patch("time.sleep") as sleep:
        with pytest.raises(ResolveError):
            get_sockaddr("missing.example.com", "80", block=True)
    assert lookup.call_count == 7
    delays = [call.args[0] for call in sleep.call_args_list]
    assert delays[0] == 2
    assert all(later == 2 * earlier for earlier, later in zip(delays, delays[1:]))


def test_blocking_resolution_stops_on_success():
    failure = socket.gaierror(socket.EAI_AGAIN, "try again")
    results = [_info(socket.AF_INET, ("192.0.2.9", 80))]
    with mock.patch("socket.getaddrinfo", side_effect=[failure, results]) as lookup, \
            mock.patch("time.sleep"):
        addr = get_sockaddr("host.example.com", "80", block=True)
    assert lookup.call_count == 2
    assert addr.host == "192.0.2.9"


def test_bind_to_address_binds_loopback():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        bind_to_address(sock, "127.0.0.1")
        assert sock.getsockname()[0] == "127.0.0.1"


def test_bind_to_address_rejects_names():
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        with pytest.raises(ValueError):
            bind_to_address(sock, "localhost")


def test_set_reuseport_sets_option():
    sock = mock.MagicMock()
    set_reuseport(sock)
    level, _option, value = sock.setsockopt.call_args.args
    assert level == socket.SOL_SOCKET
    assert value == 1


def test_set_interface_truncates_and_pads_name():
    sock = mock.MagicMock()
    set_interface(sock, "averyveryverylonginterface")
    payload = sock.setsockopt.call_args.args[2]
    assert payload.startswith(b"averyveryverylon\0")
    assert payload.rstrip(b"\0") == b"averyveryverylon"