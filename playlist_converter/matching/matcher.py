"""
Track matching orchestration.

TrackMatcher turns a list of source tracks into one MatchRecord per track,
in input order, by searching the destination platform through a
SearchProvider.

Per-track workflow:
    1. Cache check: a hit is returned as-is, no search call
    2. Extract artist/song fields and build the query list
    3. Run the queries in order:
        - score every candidate with the CandidateRanker
        - keep the best one above the acceptance floor
        - stop as soon as the best crosses the early-exit score
        - rate-limited search: sleep the rate-limit backoff, next query
        - any other failure: log, sleep the error backoff, next query
    4. Cache the outcome (also when nothing was found) and return it

A failing search never aborts a track, and a track never aborts the run.
The only ways out of match_all() early are a ConfigError before the first
track, and a timeout or stop event (MatchingCancelledError) between tracks.

Usage:
    from playlist_converter.matching import TrackMatcher, TO_SPOTIFY

    matcher = TrackMatcher(provider, TO_SPOTIFY)
    records = matcher.match_all(tracks)
    found = [r for r in records if r.found]
"""

import threading
import time
from typing import Callable, Iterable

from playlist_converter.core.exceptions import (
    ConfigError,
    MatchingCancelledError,
    ProviderError,
)
from playlist_converter.core.logger import (
    format_matched_message,
    format_no_match_message,
    get_logger,
    log_unmatched_track,
)
from playlist_converter.core.progress import MatchingProgressBar
from playlist_converter.matching.cache import MatchCache
from playlist_converter.matching.models import (
    CacheEntry,
    CandidateResult,
    MatchRecord,
    SourceTrack,
)
from playlist_converter.matching.normalizer import cache_key, extract_track_info
from playlist_converter.matching.policy import DirectionPolicy, TO_SPOTIFY
from playlist_converter.matching.provider import SearchProvider
from playlist_converter.matching.queries import QueryBuilder
from playlist_converter.matching.ranker import CandidateRanker
from playlist_converter.utils import format_duration


logger = get_logger(__name__)


class TrackMatcher:
    """
    Matches source tracks against a destination search provider.

    Attributes:
        provider: Destination search provider.
        policy: Direction policy (thresholds, timing, vocabularies).
        cache: Match cache. Shared between matchers if passed in.

    Thread Safety:
        One matcher processes its tracks sequentially. Several matchers may
        share one MatchCache from different threads.
    """

    def __init__(
        self,
        provider: SearchProvider,
        policy: DirectionPolicy = TO_SPOTIFY,
        cache: MatchCache | None = None,
        credential_provider: Callable[[], str | None] | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic
    ) -> None:
        """
        Initialize the matcher.

        Args:
            provider: Search provider for the destination platform.
            policy: Direction policy. Defaults to TO_SPOTIFY.
            cache: Match cache to use. A private one is created if None.
            credential_provider: Optional callable returning the current
                                 access token. Called before each track;
                                 a changed token is pushed to the provider
                                 with update_credentials().
            sleep: Sleep function for delays and backoffs (tests pass a
                   recorder that does not wait).
            clock: Monotonic clock used for the run timeout.
        """
        self.provider = provider
        self.policy = policy
        self.cache = cache if cache is not None else MatchCache()
        self._credential_provider = credential_provider
        self._sleep = sleep
        self._clock = clock
        self._query_builder = QueryBuilder(policy)
        self._ranker = CandidateRanker(policy)
        self._current_token: str | None = None
        self._ready = False

    def match_all(
        self,
        tracks: Iterable[SourceTrack],
        progress_bar: MatchingProgressBar | None = None,
        timeout: float | None = None,
        stop_event: threading.Event | None = None
    ) -> list[MatchRecord]:
        """
        Match every track, one at a time.

        Args:
            tracks: Source tracks, in playlist order.
            progress_bar: Optional progress bar to update and log through.
            timeout: Optional time budget in seconds for the whole run.
            stop_event: Optional event another thread can set to cancel.

        Returns:
            One MatchRecord per input track, in input order.

        Raises:
            ConfigError: The provider has no usable credential. Raised
                         before the first track is processed.
            MatchingCancelledError: Timeout reached or stop_event set. The
                                    exception carries the records completed
                                    so far.
        """
        tracks = list(tracks)
        self._ensure_ready()

        deadline = self._clock() + timeout if timeout is not None else None
        records: list[MatchRecord] = []

        for index, track in enumerate(tracks):
            if stop_event is not None and stop_event.is_set():
                raise MatchingCancelledError(
                    f"Matching cancelled after {index}/{len(tracks)} tracks",
                    records=records,
                    details={"completed": index, "total": len(tracks)}
                )
            if deadline is not None and self._clock() >= deadline:
                raise MatchingCancelledError(
                    f"Matching timed out after {index}/{len(tracks)} tracks",
                    records=records,
                    details={"completed": index, "total": len(tracks), "timeout": timeout}
                )

            self._refresh_credentials()
            logger.debug(f"[{index + 1}/{len(tracks)}] {track.display_name} ({format_duration(track.duration_ms)})")

            record, cached = self._resolve(track)
            records.append(record)
            self._report(record, cached, progress_bar)

        found = sum(1 for r in records if r.found)
        logger.debug(f"Matching finished: {found}/{len(records)} found")
        return records

    def match_track(self, track: SourceTrack) -> MatchRecord:
        """
        Match a single track.

        Returns:
            MatchRecord for the track. Never raises for search failures.
        """
        self._ensure_ready()
        self._refresh_credentials()
        record, _ = self._resolve(track)
        return record

    def _ensure_ready(self) -> None:
        if self._ready:
            return
        self._refresh_credentials()
        self.provider.ensure_ready()
        self._ready = True

    def _refresh_credentials(self) -> None:
        if self._credential_provider is None:
            return
        token = self._credential_provider()
        if token and token != self._current_token:
            if self._current_token is not None:
                logger.debug("Access token changed, updating search provider")
            self.provider.update_credentials(token)
            self._current_token = token

    def _resolve(self, track: SourceTrack) -> tuple[MatchRecord, bool]:
        """Return the record for `track` and whether it came from the cache."""
        key = cache_key(track, self.policy.name)

        entry = self.cache.get(key)
        if entry is not None:
            logger.debug(f"Cache hit for: {track.display_name}")
            record = MatchRecord.from_cache(track, entry)
            if not record.found:
                log_unmatched_track(logger, track.title, track.artist, track.url)
            return record, True

        best, best_score, queries_tried = self._search(track)
        self.cache.put(key, CacheEntry(best, best_score if best is not None else 0.0))

        if best is None:
            log_unmatched_track(logger, track.title, track.artist, track.url, queries_tried)
            return MatchRecord.unmatched(track), False
        return MatchRecord.matched(track, best, best_score), False

    def _search(self, track: SourceTrack) -> tuple[CandidateResult | None, float, int]:
        """
        Run the query loop for one track.

        Returns:
            (best candidate or None, its score, number of queries searched)
        """
        policy = self.policy
        info = extract_track_info(track, policy.noise_words)
        queries = self._query_builder.build(track, info)

        if not queries:
            logger.debug(f"No usable query for: {track.display_name!r}")
            return None, 0.0, 0

        best: CandidateResult | None = None
        best_score = policy.accept_floor
        searched = 0

        for index, query in enumerate(queries):
            if index > 0:
                self._sleep(policy.query_delay)

            searched += 1
            logger.debug(f"Searching {self.provider.name}: {query}")

            try:
                candidates = self.provider.search(query)
            except ConfigError:
                raise
            except ProviderError as e:
                if e.is_rate_limit:
                    logger.warning(
                        f"Rate limited by {self.provider.name}, "
                        f"waiting {policy.rate_limit_backoff}s: {e.message}"
                    )
                    self._sleep(policy.rate_limit_backoff)
                else:
                    logger.debug(f"Search failed for '{query}': {e.message}")
                    self._sleep(policy.error_backoff)
                continue
            except Exception as e:
                logger.warning(f"Unexpected search error for '{query}': {e}")
                self._sleep(policy.error_backoff)
                continue

            for candidate in candidates:
                score = self._ranker.score(track, candidate, info)
                if score > best_score:
                    best, best_score = candidate, score
                    logger.debug(
                        f"New best ({score:.3f}): {candidate.artist_names} - {candidate.title}"
                    )

            if best is not None and best_score > policy.early_exit_score:
                logger.debug(f"Early exit after {searched}/{len(queries)} queries")
                break

        if best is None:
            return None, 0.0, searched
        return best, best_score, searched

    def _report(self, record: MatchRecord, cached: bool, progress_bar: MatchingProgressBar | None) -> None:
        source = record.source_track.display_name
        if record.found:
            candidate = record.best_candidate
            destination = f"{candidate.artist_names} - {candidate.title}" if candidate.artists else candidate.title
            message = format_matched_message(source, destination, candidate.url, record.score)
        else:
            message = format_no_match_message(source, "no candidate above threshold")

        if progress_bar is not None:
            progress_bar.log(message)
            progress_bar.update(matched=record.found, cached=cached)
        elif record.found:
            logger.info(message)
        else:
            logger.warning(message)


def match_all(
    tracks: Iterable[SourceTrack],
    provider: SearchProvider,
    policy: DirectionPolicy = TO_SPOTIFY,
    cache: MatchCache | None = None,
    **kwargs
) -> list[MatchRecord]:
    """
    Convenience function: match `tracks` with a throwaway TrackMatcher.

    Extra keyword arguments go to TrackMatcher.match_all()
    (progress_bar, timeout, stop_event).
    """
    return TrackMatcher(provider, policy, cache=cache).match_all(tracks, **kwargs)
