"""
RNG Tests

Mulberry32 stream properties, FNV-1a string hashing and scoped streams.
Hash values are the standard FNV-1a 32-bit test vectors (ASCII strings hash the
same over UTF-16 code units as over bytes).
"""

import pytest

from packages.runstate.state.rng import (
    Mulberry32,
    derive_seed,
    hash_string_to_int,
    make_rng,
    make_scoped_rng,
    pick,
    pick_unique,
    rand_int,
    random_seed,
    shuffle,
)


class TestMulberry32:
    """Test the core generator."""

    def test_deterministic(self):
        """Same seed produces the same stream."""
        a = make_rng(42)
        b = make_rng(42)
        assert [a() for _ in range(50)] == [b() for _ in range(50)]

    def test_different_seeds_differ(self):
        """Neighbouring seeds produce different streams."""
        a = make_rng(1)
        b = make_rng(2)
        assert [a() for _ in range(5)] != [b() for _ in range(5)]

    def test_float_range(self):
        """Every draw is in [0, 1)."""
        rng = make_rng(12345)
        for _ in range(5000):
            v = rng()
            assert 0.0 <= v < 1.0

    def test_state_stays_32_bit(self):
        """Seeds are masked to unsigned 32 bits."""
        assert Mulberry32(-1).state == 0xFFFFFFFF
        assert Mulberry32(2 ** 32 + 5).state == 5
        rng = make_rng(0xFFFFFFFF)
        for _ in range(100):
            rng()
            assert 0 <= rng.state <= 0xFFFFFFFF

    def test_copy_forks_stream(self):
        """A copy continues the same sequence independently."""
        rng = make_rng(7)
        rng()
        clone = rng.copy()
        assert [rng() for _ in range(10)] == [clone() for _ in range(10)]

    def test_rough_uniformity(self):
        """Buckets of 10 are roughly even."""
        rng = make_rng(99)
        counts = [0] * 10
        for _ in range(10000):
            counts[int(rng() * 10)] += 1
        for count in counts:
            assert 800 < count < 1200


class TestStringHash:
    """FNV-1a over UTF-16 code units."""

    def test_empty_string_is_offset_basis(self):
        assert hash_string_to_int("") == 2166136261

    def test_known_vectors(self):
        """Standard FNV-1a 32-bit vectors."""
        assert hash_string_to_int("a") == 0xE40C292C
        assert hash_string_to_int("foobar") == 0xBF9CF968

    def test_non_ascii_uses_code_units(self):
        """A non-Latin character hashes as one 16-bit unit, not as UTF-8 bytes."""
        h = (2166136261 ^ 0x00E9) * 16777619 & 0xFFFFFFFF
        assert hash_string_to_int("é") == h

    def test_unsigned(self):
        for s in ("shop:d3_n0:refresh:0", "event:gate:library:d4_n1", "x" * 100):
            assert 0 <= hash_string_to_int(s) <= 0xFFFFFFFF


class TestScopedStreams:
    """Per-context sub-streams."""

    def test_scoped_matches_manual_xor(self):
        """make_scoped_rng(seed, ctx) == make_rng(seed ^ hash(ctx))."""
        seed = 42
        ctx = "d3_n1"
        a = make_scoped_rng(seed, ctx)
        b = make_rng(seed ^ hash_string_to_int(ctx))
        assert [a() for _ in range(10)] == [b() for _ in range(10)]

    def test_salt_changes_stream(self):
        a = make_scoped_rng(42, "event:gate:vending:d3_n0", 0xC0FFEE)
        b = make_scoped_rng(42, "event:gate:vending:d3_n0", 0)
        assert a() != b()

    def test_derive_seed_formula(self):
        seed, ctx, salt = 1234, "abc", 0xABCD
        assert derive_seed(seed, ctx, salt) == ((seed ^ hash_string_to_int(ctx)) ^ salt) & 0xFFFFFFFF

    def test_contexts_are_independent(self):
        """Drawing from one scope never shifts another."""
        shop = make_scoped_rng(42, "shop:d5_n0:refresh:0")
        expected = [shop() for _ in range(5)]

        noise = make_scoped_rng(42, "d5_n0")
        for _ in range(100):
            noise()
        shop_again = make_scoped_rng(42, "shop:d5_n0:refresh:0")
        assert [shop_again() for _ in range(5)] == expected


class TestHelpers:
    """rand_int, pick, shuffle, pick_unique, random_seed."""

    def test_rand_int_inclusive(self, rng_seed_42):
        seen = {rand_int(rng_seed_42, 1, 3) for _ in range(500)}
        assert seen == {1, 2, 3}

    def test_pick_empty_raises(self, rng_seed_42):
        with pytest.raises(IndexError):
            pick(rng_seed_42, [])

    def test_shuffle_is_permutation(self, rng_seed_42):
        items = list(range(20))
        out = shuffle(rng_seed_42, items)
        assert sorted(out) == items
        assert items == list(range(20)), "input must not be mutated"

    def test_pick_unique_distinct_positions(self, rng_seed_12345):
        items = ["a", "b", "c", "d", "e"]
        out = pick_unique(rng_seed_12345, items, 3)
        assert len(out) == 3
        assert len(set(out)) == 3

    def test_pick_unique_caps_at_length(self, rng_seed_12345):
        out = pick_unique(rng_seed_12345, ["x", "y"], 5)
        assert sorted(out) == ["x", "y"]

    def test_random_seed_range(self):
        for _ in range(50):
            assert 0 <= random_seed(1000) < 1000

    def test_random_seed_with_rng_is_reproducible(self):
        assert random_seed(1_000_000, make_rng(3)) == random_seed(1_000_000, make_rng(3))

    def test_random_seed_uses_module_random(self, monkeypatch):
        from types import SimpleNamespace

        from packages.runstate.state import rng as rng_module

        monkeypatch.setattr(rng_module, "random", SimpleNamespace(randrange=lambda limit: limit - 1))
        assert random_seed(1000) == 999
