"""Tests for the RPC retry policy transport."""

from __future__ import annotations

from unittest.mock import ANY, AsyncMock, patch

import httpx
import pytest

from runecache.core.remote._retrying_transport import RetryingTransport

_MODULE = "runecache.core.remote._retrying_transport"
_SLEEP_BACKOFF = f"{_MODULE}.RetryingTransport._sleep_backoff"
_HOLD = f"{_MODULE}.RetryingTransport._hold"


def _request(function: str = "get_all_runestones") -> httpx.Request:
    return httpx.Request("POST", f"https://catalog.example.supabase.co/rest/v1/rpc/{function}")


def _scripted(*outcomes: httpx.Response | Exception) -> AsyncMock:
    inner = AsyncMock(spec=httpx.AsyncBaseTransport)
    inner.handle_async_request.side_effect = list(outcomes)
    return inner


def _reads_only(request: httpx.Request) -> bool:
    return not request.url.path.endswith("mark_runestone_as_visited")


# ---------------------------------------------------------------------------
# Replayable requests
# ---------------------------------------------------------------------------


class TestReplayableRequests:
    @pytest.mark.asyncio
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_read_timeout_is_replayed(self, mock_backoff: AsyncMock) -> None:
        inner = _scripted(httpx.ReadTimeout("slow"), httpx.Response(200))

        response = await RetryingTransport(transport=inner).handle_async_request(_request())

        assert response.status_code == 200
        mock_backoff.assert_awaited_once_with(0, ANY)

    @pytest.mark.asyncio
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_gives_up_with_last_error_after_max_retries(self, mock_backoff: AsyncMock) -> None:
        inner = _scripted(*(httpx.ReadError("reset") for _ in range(3)))

        with pytest.raises(httpx.ReadError):
            await RetryingTransport(transport=inner, max_retries=2).handle_async_request(_request())

        assert inner.handle_async_request.await_count == 3
        assert [call.args[0] for call in mock_backoff.await_args_list] == [0, 1]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [502, 504])
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_gateway_errors_are_replayed(self, mock_backoff: AsyncMock, status_code: int) -> None:
        inner = _scripted(httpx.Response(status_code), httpx.Response(200))

        response = await RetryingTransport(transport=inner).handle_async_request(_request())

        assert response.status_code == 200
        mock_backoff.assert_awaited_once_with(0, ANY, at_least=0.0)

    @pytest.mark.asyncio
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_unavailable_honours_retry_after(self, mock_backoff: AsyncMock) -> None:
        inner = _scripted(httpx.Response(503, headers={"Retry-After": "7"}), httpx.Response(200))

        response = await RetryingTransport(transport=inner).handle_async_request(_request())

        assert response.status_code == 200
        mock_backoff.assert_awaited_once_with(0, ANY, at_least=7.0)

    @pytest.mark.asyncio
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_last_gateway_response_is_returned_when_retries_run_out(self, mock_backoff: AsyncMock) -> None:
        inner = _scripted(httpx.Response(503), httpx.Response(503))

        response = await RetryingTransport(transport=inner, max_retries=1).handle_async_request(_request())

        assert response.status_code == 503
        assert mock_backoff.await_count == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status_code", [400, 401, 404, 500])
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_other_statuses_pass_through(self, mock_backoff: AsyncMock, status_code: int) -> None:
        inner = _scripted(httpx.Response(status_code))

        response = await RetryingTransport(transport=inner).handle_async_request(_request())

        assert response.status_code == status_code
        mock_backoff.assert_not_awaited()


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


class TestNonReplayableRequests:
    @pytest.mark.asyncio
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_ambiguous_transport_failure_is_raised_at_once(self, mock_backoff: AsyncMock) -> None:
        inner = _scripted(httpx.ReadTimeout("slow"), httpx.Response(200))
        transport = RetryingTransport(transport=inner, replayable=_reads_only)

        with pytest.raises(httpx.ReadTimeout):
            await transport.handle_async_request(_request("mark_runestone_as_visited"))

        assert inner.handle_async_request.await_count == 1
        mock_backoff.assert_not_awaited()

    @pytest.mark.asyncio
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_gateway_error_is_returned_not_replayed(self, mock_backoff: AsyncMock) -> None:
        inner = _scripted(httpx.Response(504), httpx.Response(200))
        transport = RetryingTransport(transport=inner, replayable=_reads_only)

        response = await transport.handle_async_request(_request("mark_runestone_as_visited"))

        assert response.status_code == 504
        mock_backoff.assert_not_awaited()

    @pytest.mark.asyncio
    @patch(_SLEEP_BACKOFF, new_callable=AsyncMock)
    async def test_connection_failure_is_retried(self, mock_backoff: AsyncMock) -> None:
        inner = _scripted(httpx.ConnectError("refused"), httpx.Response(200))
        transport = RetryingTransport(transport=inner, replayable=_reads_only)

        response = await transport.handle_async_request(_request("mark_runestone_as_visited"))

        assert response.status_code == 200
        mock_backoff.assert_awaited_once_with(0, ANY)

    @pytest.mark.asyncio
    @patch(_HOLD, new_callable=AsyncMock)
    async def test_rate_limited_write_is_retried(self, mock_hold: AsyncMock) -> None:
        inner = _scripted(httpx.Response(429, headers={"Retry-After": "2"}), httpx.Response(200))
        transport = RetryingTransport(transport=inner, replayable=_reads_only)

        response = await transport.handle_async_request(_request("mark_runestone_as_visited"))

        assert response.status_code == 200
        mock_hold.assert_awaited_once_with(2.0)


# ---------------------------------------------------------------------------
# Rate limiting
# ---------------------------------------------------------------------------


class TestRateLimit:
    @pytest.mark.asyncio
    @patch(_HOLD, new_callable=AsyncMock)
    async def test_missing_retry_after_holds_one_second(self, mock_hold: AsyncMock) -> None:
        inner = _scripted(httpx.Response(429), httpx.Response(200))

        await RetryingTransport(transport=inner).handle_async_request(_request())

        mock_hold.assert_awaited_once_with(1.0)

    @pytest.mark.asyncio
    @patch(_HOLD, new_callable=AsyncMock)
    async def test_final_429_is_returned_without_holding(self, mock_hold: AsyncMock) -> None:
        inner = _scripted(httpx.Response(429))

        response = await RetryingTransport(transport=inner, max_retries=0).handle_async_request(_request())

        assert response.status_code == 429
        mock_hold.assert_not_awaited()

    @pytest.mark.asyncio
    @patch(f"{_MODULE}.asyncio.sleep", new_callable=AsyncMock)
    async def test_hold_closes_gate_until_it_expires(self, mock_sleep: AsyncMock) -> None:
        transport = RetryingTransport(transport=_scripted())
        observed: list[bool] = []
        mock_sleep.side_effect = lambda seconds: observed.append(transport._open.is_set())

        await transport._hold(0.0)

        assert observed == [False]
        assert transport._open.is_set()

    @pytest.mark.parametrize(
        ("header", "expected"),
        [("12", 12.0), ("-3", 0.0), ("Wed, 21 Oct 2015 07:28:00 GMT", None), (None, None)],
    )
    def test_parse_retry_after(self, header: str | None, expected: float | None) -> None:
        response = httpx.Response(429, headers={"Retry-After": header} if header is not None else {})

        assert RetryingTransport.parse_retry_after(response) == expected


# ---------------------------------------------------------------------------
# Backoff
# ---------------------------------------------------------------------------


class TestBackoff:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(("attempt", "expected"), [(0, 1.0), (2, 4.0), (6, 8.0)])
    @patch(f"{_MODULE}.random.uniform", return_value=0.0)
    @patch(f"{_MODULE}.asyncio.sleep", new_callable=AsyncMock)
    async def test_doubles_up_to_max_delay(
        self, mock_sleep: AsyncMock, mock_uniform: AsyncMock, attempt: int, expected: float
    ) -> None:
        await RetryingTransport(transport=_scripted())._sleep_backoff(attempt, _request())

        mock_sleep.assert_awaited_once_with(expected)

    @pytest.mark.asyncio
    @patch(f"{_MODULE}.random.uniform", return_value=0.1)
    @patch(f"{_MODULE}.asyncio.sleep", new_callable=AsyncMock)
    async def test_never_sleeps_less_than_server_floor(self, mock_sleep: AsyncMock, mock_uniform: AsyncMock) -> None:
        await RetryingTransport(transport=_scripted())._sleep_backoff(0, _request(), at_least=30.0)

        mock_sleep.assert_awaited_once_with(30.0)


@pytest.mark.asyncio
async def test_aclose_closes_inner_transport() -> None:
    inner = _scripted()

    await RetryingTransport(transport=inner).aclose()

    inner.aclose.assert_awaited_once()
