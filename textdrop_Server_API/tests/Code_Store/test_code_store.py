# test_code_store.py
# Description: Unit tests for the ephemeral code store: put/get, expiry, eviction and collision handling.
#
# Imports
import re
import threading
from concurrent.futures import ThreadPoolExecutor
#
# Third-party Libraries
import pytest
#
# Local Imports
from textdrop_Server_API.app.core.Code_Store import (
    CodeStoreConfig,
    EmptyInputError,
    EphemeralCodeStore,
    TextTooLongError
)
from textdrop_Server_API.tests.test_utils import FakeClock, ScriptedRandom, START_TIME
#
#######################################################################################################################
#
# Functions:

CODE_PATTERN = re.compile(r"^[A-Z0-9]{4}$")
TTL = 30 * 60


class TestPutAndGet:

    def test_round_trip(self, store):
        code = store.put("hello world")
        assert CODE_PATTERN.match(code)
        assert store.get(code) == "hello world"

    def test_reads_are_repeatable(self, store):
        code = store.put("read me twice")
        assert store.get(code) == "read me twice"
        assert store.get(code) == "read me twice"
        assert code in store

    def test_text_is_stored_exactly_as_given(self, store):
        text = "   padded\n\t"
        code = store.put(text)
        assert store.get(code) == text
        assert store.get_entry(code).text == text

    def test_miss_on_empty_store(self, store):
        assert store.get("ZZZZ") is None

    @pytest.mark.parametrize("code", ["", "zzzz", "AB", "ABCDE", "!!!!", "a b"])
    def test_malformed_codes_miss(self, store, code):
        store.put("something")
        assert store.get(code) is None

    def test_get_is_exact_and_does_not_normalize(self, clock):
        store = EphemeralCodeStore(CodeStoreConfig(), clock=clock, rng=ScriptedRandom("Q"))
        assert store.put("case matters") == "QQQQ"
        assert store.get("qqqq") is None
        assert store.get(" QQQQ") is None

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  "])
    def test_empty_text_rejected(self, store, text):
        with pytest.raises(EmptyInputError):
            store.put(text)
        assert store.get_stats()["size"] == 0

    def test_text_over_cap_rejected(self, clock):
        store = EphemeralCodeStore(CodeStoreConfig(max_text_length=10), clock=clock)
        with pytest.raises(TextTooLongError) as exc_info:
            store.put("x" * 11)
        assert exc_info.value.length == 11
        assert exc_info.value.max_length == 10
        assert store.get_stats()["size"] == 0

    def test_text_at_cap_accepted(self, clock):
        store = EphemeralCodeStore(CodeStoreConfig(max_text_length=10), clock=clock)
        code = store.put("x" * 10)
        assert store.get(code) == "x" * 10

    def test_default_config_has_no_cap(self, store):
        code = store.put("y" * 20000)
        assert len(store.get(code)) == 20000

    def test_cap_counts_surrounding_whitespace(self, clock):
        store = EphemeralCodeStore(CodeStoreConfig(max_text_length=10), clock=clock)
        with pytest.raises(TextTooLongError):
            store.put("  abcdefghi ")

    def test_put_entry_timestamps(self, store):
        entry = store.put_entry("stamped")
        assert entry.created_at == START_TIME
        assert entry.expires_at == START_TIME + TTL

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            EphemeralCodeStore(CodeStoreConfig(ttl_seconds=0))


class TestExpiry:

    def test_live_until_just_before_expiry(self, store, clock):
        code = store.put("x")
        clock.advance(TTL - 0.001)
        assert store.get(code) == "x"

    def test_absent_at_expiry_instant(self, store, clock):
        code = store.put("x")
        clock.advance(TTL)
        assert store.get(code) is None

    def test_absent_after_expiry(self, store, clock):
        code = store.put("x")
        clock.advance(TTL + 1)
        assert store.get(code) is None

    def test_expired_entry_evicted_on_access(self, store, clock):
        code = store.put("x")
        clock.advance(TTL + 1)
        assert store.get_stats()["size"] == 1
        assert store.get(code) is None
        stats = store.get_stats()
        assert stats["size"] == 0
        assert stats["evicted"] == 1

    def test_expired_entry_never_returns(self, store, clock):
        code = store.put("gone")
        clock.advance(TTL * 5)
        assert store.get(code) is None
        assert store.get_entry(code) is None
        assert store.take(code) is None
        assert code not in store

    def test_sweep_on_put(self, store, clock):
        store.put("old")
        clock.advance(TTL + 1)
        store.put("new")
        stats = store.get_stats()
        assert stats["size"] == 1
        assert stats["live"] == 1

    def test_no_sweep_on_put_when_disabled(self, clock):
        store = EphemeralCodeStore(CodeStoreConfig(sweep_on_put=False), clock=clock)
        old = store.put("old")
        clock.advance(TTL + 1)
        store.put("new")
        assert store.get_stats()["size"] == 2
        # Liveness is still checked on lookup
        assert store.get(old) is None

    def test_sweep_expired(self, store, clock):
        store.put("a")
        store.put("b")
        clock.advance(TTL / 2)
        keep = store.put("c")
        clock.advance(TTL / 2)
        assert store.sweep_expired() == 2
        assert store.live_codes() == [keep]
        assert len(store) == 1

    def test_expiry_is_not_extended_by_reads(self, store, clock):
        code = store.put("x")
        clock.advance(TTL - 1)
        assert store.get(code) == "x"
        clock.advance(1)
        assert store.get(code) is None

    def test_custom_ttl(self, clock):
        store = EphemeralCodeStore(CodeStoreConfig(ttl_seconds=5), clock=clock)
        code = store.put("short")
        clock.advance(4)
        assert store.get(code) == "short"
        clock.advance(1)
        assert store.get(code) is None


class TestTake:

    def test_take_returns_once(self, store):
        code = store.put("secret")
        entry = store.take(code)
        assert entry is not None
        assert entry.text == "secret"
        assert store.get(code) is None
        assert store.take(code) is None

    def test_take_unknown(self, store):
        assert store.take("QQQQ") is None


class TestCodeGeneration:

    def test_collision_retries_until_free(self, clock):
        # First put draws AAAA; second draws AAAA (taken) then BBBB
        rng = ScriptedRandom("AAAAAAAABBBB")
        store = EphemeralCodeStore(CodeStoreConfig(), clock=clock, rng=rng)
        assert store.put("first") == "AAAA"
        assert store.put("second") == "BBBB"
        assert store.get("AAAA") == "first"
        assert store.get("BBBB") == "second"
        assert store.get_stats()["fallbacks"] == 0

    def test_expired_code_can_be_reused(self, clock):
        store = EphemeralCodeStore(CodeStoreConfig(), clock=clock, rng=ScriptedRandom("A"))
        assert store.put("first") == "AAAA"
        clock.advance(TTL)
        assert store.put("second") == "AAAA"
        assert store.get("AAAA") == "second"

    def test_saturation_uses_timestamp_fallback(self, clock):
        rng = ScriptedRandom("A")
        store = EphemeralCodeStore(CodeStoreConfig(max_generation_attempts=3), clock=clock, rng=rng)
        assert store.put("first") == "AAAA"
        rng.calls = 0

        code = store.put("second")

        # 1_700_000_000_000 ms -> last four digits
        assert code == "0000"
        assert rng.calls == 3 * 4
        assert store.get(code) == "second"
        assert store.get("AAAA") == "first"
        assert store.get_stats()["fallbacks"] == 1

    def test_fallback_with_default_budget_is_bounded(self, clock):
        rng = ScriptedRandom("Z")
        store = EphemeralCodeStore(CodeStoreConfig(), clock=clock, rng=rng)
        store.put("first")
        rng.calls = 0
        clock.advance(0.1234)
        code = store.put("second")
        assert rng.calls == 100 * 4
        assert code == "0123"

    def test_fallback_replaces_live_entry_with_same_code(self):
        clock = FakeClock(start=1234.0)
        rng = ScriptedRandom("0")
        store = EphemeralCodeStore(
            CodeStoreConfig(max_generation_attempts=1), clock=clock, rng=rng
        )
        assert store.put("first") == "0000"
        # 1234000 ms -> "4000"
        assert store.put("second") == "4000"
        # Both the random draw and the fallback are taken now
        assert store.put("third") == "4000"
        assert store.get("4000") == "third"
        assert store.get("0000") == "first"

    def test_custom_alphabet_and_length(self, clock):
        config = CodeStoreConfig(alphabet="XY", code_length=6)
        store = EphemeralCodeStore(config, clock=clock)
        code = store.put("binary")
        assert len(code) == 6
        assert set(code) <= {"X", "Y"}
        assert store.get_stats()["code_space"] == 64


class TestStats:

    def test_counters(self, store, clock):
        code = store.put("x")
        store.get(code)
        store.get("NOPE")
        clock.advance(TTL)
        store.get(code)
        stats = store.get_stats()
        assert stats["puts"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 2
        assert stats["evicted"] == 1
        assert stats["ttl_seconds"] == TTL
        assert stats["code_space"] == 36 ** 4

    def test_clear(self, store):
        store.put("x")
        store.clear()
        assert len(store) == 0
        assert store.get_stats()["puts"] == 0


class TestConcurrency:

    def test_concurrent_puts_get_distinct_codes(self):
        store = EphemeralCodeStore(CodeStoreConfig())
        texts = [f"text {i}" for i in range(200)]
        barrier = threading.Barrier(8)

        def worker(chunk):
            barrier.wait()
            return [(store.put(t), t) for t in chunk]

        chunks = [texts[i::8] for i in range(8)]
        with ThreadPoolExecutor(max_workers=8) as pool:
            results = [pair for part in pool.map(worker, chunks) for pair in part]

        codes = [code for code, _ in results]
        assert len(set(codes)) == len(texts)
        for code, text in results:
            assert store.get(code) == text
        assert store.get_stats()["fallbacks"] == 0

    def test_concurrent_get_and_sweep_agree(self, clock):
        store = EphemeralCodeStore(CodeStoreConfig(), clock=clock)
        codes = [store.put(f"t{i}") for i in range(100)]
        clock.advance(TTL)
        seen = []

        def reader():
            for code in codes:
                seen.append(store.get(code))

        threads = [threading.Thread(target=reader) for _ in range(4)]
        threads.append(threading.Thread(target=store.sweep_expired))
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert all(value is None for value in seen)
        assert store.get_stats()["size"] == 0

#
# End of test_code_store.py
#######################################################################################################################
