"""
Property-based tests for the resolution cache.

Time is driven by a fake clock so expiry can be tested exactly.
"""

import asyncio

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from antns.cache import ResolutionCache
from antns.exceptions import NoValidRecordsError


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


class CountingResolver:
    """Resolves to a versioned target and counts calls per domain."""

    def __init__(self) -> None:
        self.calls: dict[str, int] = {}
        self.fail = False

    async def __call__(self, domain: str) -> str:
        self.calls[domain] = self.calls.get(domain, 0) + 1
        if self.fail:
            raise NoValidRecordsError(code="no_valid_records", message=f"{domain} has no records")
        return f"{domain}-v{self.calls[domain]}"


class TestTtlExpiryProperty:
    """Property-based tests for TTL semantics."""

    def test_entry_fresh_before_ttl_and_stale_after(self) -> None:
        """With a 60 s TTL, a lookup at 59 s hits and one at 61 s resolves again."""
        clock = FakeClock()
        resolver = CountingResolver()

        async def scenario():
            cache = ResolutionCache(resolver, ttl_seconds=60, clock=clock)
            first = await cache.lookup("alice.ant")
            clock.now += 59
            second = await cache.lookup("alice.ant")
            clock.now += 2
            third = await cache.lookup("alice.ant")
            return first, second, third

        first, second, third = asyncio.run(scenario())
        assert first == second == "alice.ant-v1"
        assert third == "alice.ant-v2"
        assert resolver.calls["alice.ant"] == 2

    @given(
        ttl=st.integers(min_value=1, max_value=10_000),
        elapsed=st.floats(min_value=0, max_value=20_000, allow_nan=False),
    )
    @settings(max_examples=100)
    def test_hit_iff_age_below_ttl(self, ttl: int, elapsed: float) -> None:
        """
        *For any* TTL and elapsed time, a second lookup SHALL be served from
        the cache exactly when the entry's age is below the TTL.
        """
        clock = FakeClock()
        resolver = CountingResolver()

        async def scenario():
            cache = ResolutionCache(resolver, ttl_seconds=ttl, clock=clock)
            await cache.lookup("bob.ant")
            clock.now += elapsed
            return await cache.lookup("bob.ant")

        target = asyncio.run(scenario())
        expected_calls = 1 if clock.now - 1000.0 < ttl else 2
        assert resolver.calls["bob.ant"] == expected_calls
        assert target == f"bob.ant-v{expected_calls}"

    @given(domains=st.lists(st.sampled_from(["a.ant", "b.ant", "c.autonomi"]), min_size=1, max_size=20))
    @settings(max_examples=100)
    def test_each_domain_resolved_once_within_ttl(self, domains: list[str]) -> None:
        """
        *For any* sequence of lookups within the TTL, each distinct domain
        SHALL be resolved exactly once.
        """
        resolver = CountingResolver()

        async def scenario():
            cache = ResolutionCache(resolver, ttl_seconds=3600, clock=FakeClock())
            for domain in domains:
                await cache.lookup(domain)
            return await cache.size()

        size = asyncio.run(scenario())
        assert size == len(set(domains))
        assert all(count == 1 for count in resolver.calls.values())


class TestCacheEdgeCases:
    """Disabled cache, failures and concurrency."""

    def test_zero_ttl_disables_caching(self) -> None:
        resolver = CountingResolver()

        async def scenario():
            cache = ResolutionCache(resolver, ttl_seconds=0, clock=FakeClock())
            await cache.lookup("alice.ant")
            await cache.lookup("alice.ant")
            return cache.enabled, await cache.size(), await cache.get("alice.ant")

        enabled, size, entry = asyncio.run(scenario())
        assert not enabled
        assert size == 0
        assert entry is None
        assert resolver.calls["alice.ant"] == 2

    def test_negative_ttl_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            ResolutionCache(CountingResolver(), ttl_seconds=-1)

    def test_failures_are_not_cached_and_keep_old_entry(self) -> None:
        clock = FakeClock()
        resolver = CountingResolver()

        async def scenario():
            cache = ResolutionCache(resolver, ttl_seconds=10, clock=clock)
            await cache.lookup("alice.ant")
            clock.now += 11
            resolver.fail = True
            with pytest.raises(NoValidRecordsError):
                await cache.lookup("alice.ant")
            with pytest.raises(NoValidRecordsError):
                await cache.lookup("alice.ant")
            return await cache.size()

        assert asyncio.run(scenario()) == 1
        assert resolver.calls["alice.ant"] == 3

    def test_entry_records_timestamp(self) -> None:
        clock = FakeClock(now=42.0)

        async def scenario():
            cache = ResolutionCache(CountingResolver(), ttl_seconds=5, clock=clock)
            await cache.lookup("alice.ant")
            return await cache.get("alice.ant")

        entry = asyncio.run(scenario())
        assert entry is not None
        assert entry.timestamp == 42.0
        assert entry.target == "alice.ant-v1"

    def test_concurrent_lookups_all_succeed(self) -> None:
        resolver = CountingResolver()

        async def scenario():
            cache = ResolutionCache(resolver, ttl_seconds=60, clock=FakeClock())
            return await asyncio.gather(*(cache.lookup("alice.ant") for _ in range(10)))

        results = asyncio.run(scenario())
        assert len(results) == 10
        assert all(r.startswith("alice.ant-v") for r in results)
