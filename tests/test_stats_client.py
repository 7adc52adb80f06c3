import asyncio

import httpx
import pytest

from dfsproj.aggregation import ProjectionAggregator
from dfsproj.estimators import build_baseline_estimators
from dfsproj.stats import MLB_API_BASE, StatsClient, StatsNotFoundError, StatsProviderError
from dfsproj.stats.client import _TTLCache

from tests.conftest import make_player


def _stats_payload(*splits):
    return {"stats": [{"splits": list(splits)}]}


def _client(handler, **kwargs) -> StatsClient:
    transport = httpx.MockTransport(handler)
    return StatsClient(
        client=httpx.AsyncClient(transport=transport, base_url=MLB_API_BASE),
        retry_delay=0.0,
        **kwargs,
    )


@pytest.mark.anyio
async def test_season_stats_are_parsed_and_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        assert request.url.path == "/api/v1/people/543037/stats"
        assert request.url.params["stats"] == "season"
        assert request.url.params["group"] == "pitching"
        return httpx.Response(
            200,
            json=_stats_payload(
                {"season": "2024", "stat": {"gamesStarted": 20, "inningsPitched": "120.2", "era": "3.41", "note": "x"}}
            ),
        )

    stats = _client(handler)
    line = await stats.get_season_stats(543037, 2024, "pitching")
    again = await stats.get_season_stats(543037, 2024, "pitching")

    assert line["gamesStarted"] == 20.0
    assert line["inningsPitched"] == pytest.approx(120 + 2 / 3)
    assert line["era"] == pytest.approx(3.41)
    assert "note" not in line
    assert again == line
    assert len(calls) == 1


@pytest.mark.anyio
async def test_missing_player_raises_not_found():
    stats = _client(lambda request: httpx.Response(404))
    with pytest.raises(StatsNotFoundError):
        await stats.get_season_stats(1, 2024)


@pytest.mark.anyio
async def test_empty_splits_raise_not_found():
    stats = _client(lambda request: httpx.Response(200, json={"stats": []}))
    with pytest.raises(StatsNotFoundError):
        await stats.get_season_stats(1, 2024)


@pytest.mark.anyio
async def test_server_errors_are_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        if len(attempts) < 3:
            return httpx.Response(503)
        return httpx.Response(200, json=_stats_payload({"stat": {"gamesPlayed": 10}}))

    stats = _client(handler)
    line = await stats.get_season_stats(1, 2024)
    assert line["gamesPlayed"] == 10.0
    assert len(attempts) == 3


@pytest.mark.anyio
async def test_exhausted_retries_raise_provider_error():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    stats = _client(handler, retries=2)
    with pytest.raises(StatsProviderError) as excinfo:
        await stats.get_season_stats(1, 2024)
    assert not isinstance(excinfo.value, StatsNotFoundError)
    assert len(attempts) == 2


@pytest.mark.anyio
async def test_client_errors_are_not_retried():
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(request)
        return httpx.Response(400)

    stats = _client(handler)
    with pytest.raises(StatsProviderError):
        await stats.get_season_stats(1, 2024)
    assert len(attempts) == 1


@pytest.mark.anyio
async def test_latest_season_falls_back_to_previous_year():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.params["season"] == "2025":
            return httpx.Response(200, json=_stats_payload())
        return httpx.Response(200, json=_stats_payload({"stat": {"gamesPlayed": 150, "hits": 160}}))

    stats = _client(handler)
    season, line = await stats.get_latest_season_stats(1, 2025)
    assert season == 2024
    assert line["hits"] == 160.0


@pytest.mark.anyio
async def test_career_stats_sorted_by_season():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["stats"] == "yearByYear"
        return httpx.Response(
            200,
            json=_stats_payload(
                {"season": "2023", "stat": {"homeRuns": 37}},
                {"season": "2021", "stat": {"homeRuns": 39}},
                {"stat": {"homeRuns": 1}},
            ),
        )

    seasons = await _client(handler).get_career_stats(592450)
    assert [season for season, _ in seasons] == [2021, 2023]


@pytest.mark.anyio
async def test_matchup_history_sums_splits():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.params["opposingPlayerId"] == "543037"
        return httpx.Response(
            200,
            json=_stats_payload(
                {"stat": {"atBats": 12, "hits": 4, "homeRuns": 1}},
                {"stat": {"atBats": 8, "hits": 1}},
            ),
        )

    totals = await _client(handler).get_matchup_history(605141, 543037)
    assert totals == {"atBats": 20.0, "hits": 5.0, "homeRuns": 1.0}


@pytest.mark.anyio
async def test_concurrent_misses_share_one_request():
    calls = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        await asyncio.sleep(0.01)
        return httpx.Response(200, json=_stats_payload({"stat": {"gamesPlayed": 10}}))

    stats = _client(handler)
    lines = await asyncio.gather(*(stats.get_season_stats(1, 2024) for _ in range(6)))

    assert len(calls) == 1
    assert all(line == {"gamesPlayed": 10.0} for line in lines)


@pytest.mark.anyio
async def test_shared_failure_reaches_every_waiter_and_is_not_cached():
    calls = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        await asyncio.sleep(0.01)
        if len(calls) == 1:
            return httpx.Response(400)
        return httpx.Response(200, json=_stats_payload({"stat": {"gamesPlayed": 3}}))

    stats = _client(handler)
    results = await asyncio.gather(*(stats.get_season_stats(1, 2024) for _ in range(3)), return_exceptions=True)
    assert all(isinstance(result, StatsProviderError) for result in results)
    assert len(calls) == 1

    assert (await stats.get_season_stats(1, 2024))["gamesPlayed"] == 3.0
    assert len(calls) == 2


@pytest.mark.anyio
async def test_cancelled_waiter_does_not_cancel_shared_request():
    calls = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        await asyncio.sleep(0.05)
        return httpx.Response(200, json=_stats_payload({"stat": {"gamesPlayed": 7}}))

    stats = _client(handler)
    impatient = asyncio.create_task(stats.get_season_stats(1, 2024))
    patient = asyncio.create_task(stats.get_season_stats(1, 2024))
    await asyncio.sleep(0.01)
    impatient.cancel()

    assert (await patient)["gamesPlayed"] == 7.0
    with pytest.raises(asyncio.CancelledError):
        await impatient
    assert len(calls) == 1


@pytest.mark.anyio
async def test_projecting_a_batter_fetches_each_stat_line_once(game):
    calls = []

    async def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.params["stats"])
        await asyncio.sleep(0.01)
        if request.url.params["stats"] == "vsPlayerTotal":
            return httpx.Response(200, json=_stats_payload({"stat": {"atBats": 20, "hits": 6, "homeRuns": 2}}))
        return httpx.Response(
            200,
            json=_stats_payload(
                {"stat": {"gamesPlayed": 100, "atBats": 400, "hits": 120, "homeRuns": 30, "runs": 80, "rbi": 90}}
            ),
        )

    aggregator = ProjectionAggregator(build_baseline_estimators(_client(handler)))
    result = await aggregator.project(make_player(592450, "Aaron Judge"), game)

    assert result.diagnostics.defaulted_categories == []
    assert calls.count("season") == 1
    assert calls.count("vsPlayerTotal") == 1


def test_ttl_cache_purges_expired_entries_and_stays_bounded():
    cache = _TTLCache(max_entries=3)
    cache.set("stale-1", 1, ttl=0)
    cache.set("stale-2", 2, ttl=0)
    cache.set("fresh", 3, ttl=60)
    cache.set("newer", 4, ttl=60)

    assert len(cache) == 2
    assert cache.get("fresh") == 3

    cache.set("third", 5, ttl=60)
    cache.set("fourth", 6, ttl=60)
    assert len(cache) == 3
    assert cache.get("fresh") is None
    assert cache.get("fourth") == 6
