import math
import time
from unittest.mock import AsyncMock, MagicMock

import pytest

from edgelimit.core.errors import BindingError
from edgelimit.core.limiter import kv_rate_limiter
from edgelimit.core.strategies.base import Outcome

BASE_OPTIONS = {
    "binding": "KV",
    "prefix": "ratelimit:",
    "limit": 5,
    "period": 60,
    "interval": 0,
    "key_generator": lambda ctx: "ip",
}


def stub_counter(result):
    """Counter factory returning a fixed result and recording its options."""
    factory = MagicMock()
    factory.return_value = AsyncMock(return_value=result)
    return factory


@pytest.fixture
def kv_binding():
    binding = MagicMock()
    binding.get = AsyncMock(return_value=None)
    binding.put = AsyncMock()
    return binding


def now_epoch() -> int:
    return math.ceil(time.time())


class TestHeaders:
    @pytest.mark.asyncio
    async def test_error_handler_sets_reset_to_now_plus_reset(self, make_ctx, kv_binding):
        ctx = make_ctx(env={"KV": kv_binding})
        call_next = AsyncMock()
        limiter = kv_rate_limiter(
            BASE_OPTIONS,
            counter=stub_counter({"success": False, "remaining": 0, "reset": 5}),
        )

        before = now_epoch()
        await limiter(ctx, call_next)

        assert ctx.thrown["status"] == 429
        assert ctx.thrown["message"] == "Too Many Requests"
        headers = ctx.thrown["headers"]
        assert int(headers["X-RateLimit-Reset"]) >= before + 5
        assert headers["Retry-After"] == "5"
        assert headers["X-RateLimit-Limit"] == "5"
        assert headers["X-RateLimit-Remaining"] == "0"
        call_next.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_success_handler_sets_headers_after_next(self, make_ctx, kv_binding):
        ctx = make_ctx(env={"KV": kv_binding})

        async def call_next():
            assert ctx.headers_set is None

        limiter = kv_rate_limiter(
            BASE_OPTIONS,
            counter=stub_counter(Outcome(success=True, remaining=4, reset=10)),
        )

        before = now_epoch()
        await limiter(ctx, call_next)

        assert ctx.headers_set["X-RateLimit-Limit"] == "5"
        assert ctx.headers_set["X-RateLimit-Remaining"] == "4"
        assert int(ctx.headers_set["X-RateLimit-Reset"]) >= before + 10
        assert "Retry-After" not in ctx.headers_set

    @pytest.mark.asyncio
    async def test_success_handler_still_runs_when_next_raises(self, make_ctx, kv_binding):
        ctx = make_ctx(env={"KV": kv_binding})
        boom = RuntimeError("boom")
        limiter = kv_rate_limiter(
            BASE_OPTIONS,
            counter=stub_counter({"success": True, "remaining": 3, "reset": 2}),
        )

        before = now_epoch()
        with pytest.raises(RuntimeError) as exc_info:
            await limiter(ctx, AsyncMock(side_effect=boom))

        assert exc_info.value is boom
        assert ctx.headers_set["X-RateLimit-Limit"] == "5"
        assert ctx.headers_set["X-RateLimit-Remaining"] == "3"
        assert int(ctx.headers_set["X-RateLimit-Reset"]) >= before + 2

    @pytest.mark.asyncio
    async def test_custom_handlers_receive_limit_remaining_reset(self, make_ctx, kv_binding):
        calls = []
        ctx = make_ctx(env={"KV": kv_binding})
        limiter = kv_rate_limiter(
            BASE_OPTIONS,
            counter=stub_counter(Outcome(success=False, remaining=0, reset=7)),
            error_handler=lambda *args: calls.append(args),
        )

        await limiter(ctx, AsyncMock())

        assert calls == [(ctx, 5, 0, 7)]


class TestCounterWiring:
    @pytest.mark.asyncio
    async def test_counter_receives_validated_options(self, make_ctx, kv_binding):
        counter = stub_counter(Outcome(success=True, remaining=4, reset=1))
        limiter = kv_rate_limiter(
            binding="KV",
            limit="5",
            period=60,
            key_generator=lambda c: "ip",
            counter=counter,
        )

        await limiter(make_ctx(env={"KV": kv_binding}), AsyncMock())

        counter.assert_called_once_with(
            store=kv_binding, prefix="ratelimit:", limit=5, period=60, interval=0
        )
        counter.return_value.assert_awaited_once_with("ip")

    @pytest.mark.asyncio
    async def test_default_counter_uses_store(self, make_ctx, store):
        ctx = make_ctx(env={"KV": store})
        call_next = AsyncMock()
        limiter = kv_rate_limiter(BASE_OPTIONS, limit=2)

        for _ in range(3):
            await limiter(ctx, call_next)

        assert call_next.await_count == 2
        assert ctx.thrown["headers"]["Retry-After"] == "60"
        assert store.keys() == ["ratelimit:ip"]


class TestSkippingAndBindings:
    @pytest.mark.asyncio
    async def test_falsy_key_skips_everything(self, make_ctx):
        factory = MagicMock()
        call_next = AsyncMock()
        limiter = kv_rate_limiter(BASE_OPTIONS, binding=factory, key_generator=lambda c: None)

        await limiter(make_ctx(), call_next)

        call_next.assert_awaited_once()
        factory.assert_not_called()

    @pytest.mark.asyncio
    async def test_binding_without_put_is_rejected(self, make_ctx):
        class ReadOnly:
            async def get(self, key):
                return None

        limiter = kv_rate_limiter(BASE_OPTIONS, binding=lambda c: ReadOnly())

        with pytest.raises(BindingError, match="KV namespace"):
            await limiter(make_ctx(), AsyncMock())

    @pytest.mark.asyncio
    async def test_binding_error_is_not_a_rate_limit(self, make_ctx):
        ctx = make_ctx(env={})
        limiter = kv_rate_limiter(BASE_OPTIONS)

        with pytest.raises(BindingError):
            await limiter(ctx, AsyncMock())

        assert ctx.thrown is None

    @pytest.mark.asyncio
    async def test_string_binding_is_read_from_env(self, make_ctx, kv_binding):
        call_next = AsyncMock()
        limiter = kv_rate_limiter(
            BASE_OPTIONS,
            binding="MY_KV",
            prefix="test:",
            key_generator=lambda c: "user123",
            counter=stub_counter(Outcome(success=True, remaining=4, reset=10)),
        )

        await limiter(make_ctx(env={"MY_KV": kv_binding}), call_next)

        call_next.assert_awaited_once()


def test_invalid_options_fail_at_construction():
    with pytest.raises(TypeError, match="options.interval must be <= options.period"):
        kv_rate_limiter(BASE_OPTIONS, interval=61)


def test_interval_equal_to_period_builds_limiter():
    limiter = kv_rate_limiter(BASE_OPTIONS, interval=60)

    assert callable(limiter)
    assert limiter.options.interval == 60
