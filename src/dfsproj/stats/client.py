"""Async client for the public MLB Stats API."""

from __future__ import annotations

import asyncio
import functools
import logging
import time
from typing import Any, Dict, Hashable, List, Mapping, Optional, Tuple

import httpx


logger = logging.getLogger(__name__)

MLB_API_BASE = "https://statsapi.mlb.com/api/v1"
DEFAULT_TIMEOUT = 30.0
DEFAULT_RETRIES = 3
RETRY_DELAY = 1.0
MAX_RETRY_DELAY = 5.0

# Seconds.
DEFAULT_CACHE_TTL: Mapping[str, float] = {
    "season": 6 * 60 * 60,
    "career": 6 * 60 * 60,
    "matchup": 6 * 60 * 60,
    "default": 60 * 60,
}
DEFAULT_CACHE_SIZE = 4096

StatBundle = Dict[str, float]


class StatsProviderError(RuntimeError):
    """The stats provider could not be reached or returned an error."""


class StatsNotFoundError(StatsProviderError):
    """The stats provider has no data for the request."""


def _innings_to_float(value: str) -> float:
    # "45.1" means 45 and one third innings.
    whole, _, outs = value.partition(".")
    return int(whole or 0) + int(outs or 0) / 3.0


def _parse_stat_line(stat: Mapping[str, Any]) -> StatBundle:
    bundle: StatBundle = {}
    for key, value in stat.items():
        if isinstance(value, bool):
            continue
        if isinstance(value, (int, float)):
            bundle[key] = float(value)
            continue
        if not isinstance(value, str):
            continue
        text = value.strip()
        try:
            bundle[key] = _innings_to_float(text) if key == "inningsPitched" else float(text)
        except ValueError:
            continue
    return bundle


def _splits(payload: Mapping[str, Any]) -> List[Mapping[str, Any]]:
    splits: List[Mapping[str, Any]] = []
    for block in payload.get("stats") or []:
        splits.extend(block.get("splits") or [])
    return splits


class _TTLCache:
    """Expiring entries, bounded at ``max_entries`` with oldest-first eviction."""

    def __init__(self, max_entries: int = DEFAULT_CACHE_SIZE) -> None:
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}
        self._max_entries = max(1, max_entries)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: Hashable) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires, value = entry
        if expires <= time.monotonic():
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: Hashable, value: Any, ttl: float) -> None:
        now = time.monotonic()
        self._entries.pop(key, None)
        if len(self._entries) >= self._max_entries:
            self.purge(now)
        while len(self._entries) >= self._max_entries:
            self._entries.pop(next(iter(self._entries)))
        self._entries[key] = (now + ttl, value)

    def purge(self, now: float | None = None) -> int:
        now = time.monotonic() if now is None else now
        expired = [key for key, (expires, _) in self._entries.items() if expires <= now]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()


class StatsClient:
    """Fetch season, career and matchup stat lines.

    Every call is fallible: missing data raises :class:`StatsNotFoundError`
    and transport or server failures raise :class:`StatsProviderError` once
    the retries are spent. Successful responses are memoized per kind with the
    TTLs in :data:`DEFAULT_CACHE_TTL`, at most ``cache_size`` of them, and
    concurrent calls for the same request wait on a single fetch.
    """

    def __init__(
        self,
        *,
        base_url: str = MLB_API_BASE,
        client: httpx.AsyncClient | None = None,
        retries: int = DEFAULT_RETRIES,
        retry_delay: float = RETRY_DELAY,
        cache_ttl: Mapping[str, float] | None = None,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ) -> None:
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=DEFAULT_TIMEOUT,
            headers={"Accept": "application/json"},
        )
        self._retries = max(1, retries)
        self._retry_delay = max(0.0, retry_delay)
        self._ttl = {**DEFAULT_CACHE_TTL, **(cache_ttl or {})}
        self._cache = _TTLCache(cache_size)
        self._inflight: Dict[Hashable, "asyncio.Future[Mapping[str, Any]]"] = {}

    async def __aenter__(self) -> "StatsClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    def clear_cache(self) -> None:
        self._cache.clear()

    async def _get_json(self, path: str, params: Mapping[str, Any]) -> Mapping[str, Any]:
        last_error: Exception | None = None
        for attempt in range(self._retries):
            try:
                response = await self._client.get(path, params=dict(params))
            except httpx.TransportError as exc:
                last_error = exc
            else:
                if response.status_code == 404:
                    raise StatsNotFoundError(f"{path} returned 404")
                if response.status_code == 429 or response.status_code >= 500:
                    last_error = StatsProviderError(f"{path} returned {response.status_code}")
                elif response.is_error:
                    raise StatsProviderError(f"{path} returned {response.status_code}")
                else:
                    try:
                        return response.json()
                    except ValueError as exc:
                        raise StatsProviderError(f"{path} returned invalid JSON") from exc

            if attempt + 1 < self._retries:
                delay = min(self._retry_delay * (2**attempt), MAX_RETRY_DELAY)
                logger.debug("Retrying %s in %.1fs after %s", path, delay, last_error)
                await asyncio.sleep(delay)

        raise StatsProviderError(f"{path} failed after {self._retries} attempts: {last_error}") from last_error

    async def _fetch(self, kind: str, cache_key: Hashable, path: str, params: Mapping[str, Any]) -> Mapping[str, Any]:
        payload = await self._get_json(path, params)
        self._cache.set(cache_key, payload, self._ttl.get(kind, self._ttl["default"]))
        return payload

    async def _cached(self, kind: str, key: Hashable, path: str, params: Mapping[str, Any]) -> Mapping[str, Any]:
        cache_key = (kind, key)
        cached = self._cache.get(cache_key)
        if cached is not None:
            return cached
        # Concurrent misses for the same key share one request.
        task = self._inflight.get(cache_key)
        if task is None:
            task = asyncio.ensure_future(self._fetch(kind, cache_key, path, params))
            self._inflight[cache_key] = task
            task.add_done_callback(functools.partial(self._request_done, cache_key))
        return await asyncio.shield(task)

    def _request_done(self, cache_key: Hashable, task: "asyncio.Future[Mapping[str, Any]]") -> None:
        if self._inflight.get(cache_key) is task:
            del self._inflight[cache_key]
        if not task.cancelled() and task.exception() is not None:
            logger.debug("Stats request %s failed: %s", cache_key, task.exception())

    async def get_season_stats(self, player_id: int, season: int, group: str = "hitting") -> StatBundle:
        payload = await self._cached(
            "season",
            (player_id, season, group),
            f"/people/{player_id}/stats",
            {"stats": "season", "season": season, "group": group},
        )
        splits = _splits(payload)
        if not splits:
            raise StatsNotFoundError(f"no {group} stats for player {player_id} in {season}")
        return _parse_stat_line(splits[0].get("stat") or {})

    async def get_career_stats(self, player_id: int, group: str = "hitting") -> List[Tuple[int, StatBundle]]:
        """Season-by-season lines as ``(season, bundle)`` pairs, oldest first."""

        payload = await self._cached(
            "career",
            (player_id, group),
            f"/people/{player_id}/stats",
            {"stats": "yearByYear", "group": group},
        )
        seasons: List[Tuple[int, StatBundle]] = []
        for split in _splits(payload):
            try:
                season = int(split.get("season"))
            except (TypeError, ValueError):
                continue
            seasons.append((season, _parse_stat_line(split.get("stat") or {})))
        if not seasons:
            raise StatsNotFoundError(f"no career {group} stats for player {player_id}")
        return sorted(seasons, key=lambda item: item[0])

    async def get_matchup_history(self, batter_id: int, pitcher_id: int) -> StatBundle:
        """Career batter-vs-pitcher totals, summed across seasons."""

        payload = await self._cached(
            "matchup",
            (batter_id, pitcher_id),
            f"/people/{batter_id}/stats",
            {"stats": "vsPlayerTotal", "opposingPlayerId": pitcher_id, "group": "hitting"},
        )
        totals: StatBundle = {}
        for split in _splits(payload):
            for key, value in _parse_stat_line(split.get("stat") or {}).items():
                totals[key] = totals.get(key, 0.0) + value
        if not totals:
            raise StatsNotFoundError(f"no matchup history for batter {batter_id} vs pitcher {pitcher_id}")
        return totals

    async def get_latest_season_stats(
        self, player_id: int, season: int, group: str = "hitting"
    ) -> Tuple[int, StatBundle]:
        """Season stats, falling back to the previous season when the current one is empty."""

        try:
            return season, await self.get_season_stats(player_id, season, group)
        except StatsNotFoundError:
            logger.debug("No %s stats for %s in %s; trying %s", group, player_id, season, season - 1)
            return season - 1, await self.get_season_stats(player_id, season - 1, group)
