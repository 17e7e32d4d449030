import ipaddress
import random

import pytest

from tgeoip.aggregation import aggregate, aggregate_strings, merge_ranges, range_to_prefixes


def nets(*values):
    return [ipaddress.IPv4Network(v) for v in values]


def covered(prefixes):
    return {int(a) for p in prefixes for a in p}


def test_empty_input():
    assert aggregate([]) == []
    assert merge_ranges([]) == []


def test_single_address():
    assert aggregate([ipaddress.IPv4Address('203.0.113.9')]) == nets('203.0.113.9/32')


def test_unaligned_run_splits_on_alignment():
    # 10 is only 2-aligned, so 10-13 cannot be a single /30
    assert aggregate([10, 11, 12, 13]) == nets('0.0.0.10/31', '0.0.0.12/31')


def test_aligned_run_becomes_one_prefix():
    assert aggregate([8, 9, 10, 11]) == nets('0.0.0.8/30')


def test_full_aligned_block():
    block = ipaddress.IPv4Network('192.168.0.0/23')
    assert aggregate(list(block)) == [block]


def test_hand_computed_range():
    assert range_to_prefixes(1, 14) == nets(
        '0.0.0.1/32', '0.0.0.2/31', '0.0.0.4/30',
        '0.0.0.8/30', '0.0.0.12/31', '0.0.0.14/32'
    )


def test_whole_address_space():
    assert range_to_prefixes(0, 2 ** 32 - 1) == nets('0.0.0.0/0')


def test_top_of_address_space():
    assert range_to_prefixes(2 ** 32 - 2, 2 ** 32 - 1) == nets('255.255.255.254/31')


def test_merge_ranges_dedupes_and_sorts():
    assert merge_ranges([5, 3, 4, 4, 9, 10, 1]) == [(1, 1), (3, 5), (9, 10)]


@pytest.mark.parametrize('lo,hi', [
    (0, 0), (1, 14), (10, 13), (7, 1030),
    (int(ipaddress.IPv4Address('91.108.4.1')), int(ipaddress.IPv4Address('91.108.7.254'))),
    (int(ipaddress.IPv4Address('149.154.160.1')), int(ipaddress.IPv4Address('149.154.175.254'))),
])
def test_matches_minimal_summary(lo, hi):
    expected = list(ipaddress.summarize_address_range(ipaddress.IPv4Address(lo), ipaddress.IPv4Address(hi)))
    result = range_to_prefixes(lo, hi)
    assert result == expected
    assert len(result) <= len(expected)


def test_round_trip_and_idempotence():
    rng = random.Random(7)
    base = int(ipaddress.IPv4Address('95.161.64.0'))
    values = {base + rng.randrange(0, 1024) for _ in range(600)}

    prefixes = aggregate(values)
    assert covered(prefixes) == values

    re_expanded = [a for p in prefixes for a in p]
    assert aggregate(re_expanded) == prefixes


def test_prefixes_do_not_overlap_or_merge():
    prefixes = aggregate(range(3, 300))
    for a, b in zip(prefixes, prefixes[1:]):
        assert int(a.broadcast_address) < int(b.network_address)
        # Adjacent equal-size siblings would have been emitted as their parent
        if a.prefixlen == b.prefixlen and int(a.broadcast_address) + 1 == int(b.network_address):
            assert a.supernet() != b.supernet()


def test_strings_and_junk():
    assert aggregate_strings(['10.0.0.1', 'junk', '10.0.0.0', '10.0.0.1', '::1']) == ['10.0.0.0/31']
