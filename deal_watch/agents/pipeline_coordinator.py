# agents/pipeline_coordinator.py
"""
Pipeline Coordinator (background runner)
Runs the deal pipeline once per cycle:
1. Fetch active watchlists from the backend
2. Group them by destination (one scrape per destination)
3. Publish a price event per snapshot per watching user
4. Score each snapshot once against its price history
5. Match each deal once per watching user
6. Dispatch immediate/soon matches, queue monitor matches for the digest

Failures are contained at the smallest scope: a storage fault skips one
hotel, a fetch fault skips one destination, publish and dispatch faults
are logged and the cycle moves on.
"""

import asyncio
from typing import Any, Dict, List, Optional

from loguru import logger

from ..algorithms.deal_scorer import DealScoringEngine
from ..algorithms.preference_matcher import PreferenceMatcher
from ..errors import (
    CollaboratorError,
    ConfigurationError,
    DispatchFailure,
    FetchFailure,
    PublishFailure,
    StorageUnavailable
)
from ..interfaces.backend_client import BackendClient
from ..interfaces.dispatcher import DealDispatcher
from ..interfaces.hotel_source import HotelSource
from ..kafka_client.interface import EventBus
from ..schemas.deal_schemas import (
    CycleReport,
    DealVerdict,
    HotelSnapshot,
    MatchResult,
    PreferencePolicy,
    Watchlist,
    utcnow
)

DEFAULT_DESTINATION_DELAY_SECONDS = 5.0
DEFAULT_CYCLE_INTERVAL_HOURS = 2.0
DEFAULT_PUBLISH_TIMEOUT_SECONDS = 10.0


def group_by_destination(watchlists: List[Watchlist]) -> Dict[str, List[Watchlist]]:
    """
    Group watchlists by destination, first-seen order

    A user watching the same destination twice is kept once, so each
    deal is matched at most once per user.
    """
    groups: Dict[str, List[Watchlist]] = {}
    for watchlist in watchlists:
        watchers = groups.setdefault(watchlist.destination, [])
        if all(w.user_id != watchlist.user_id for w in watchers):
            watchers.append(watchlist)
    return groups


class PipelineCoordinator:
    """
    Background runner for the scrape -> score -> match -> dispatch pipeline.
    One cycle at start, then one every cycle_interval_hours until stopped.
    """

    def __init__(
        self,
        engine: DealScoringEngine,
        matcher: PreferenceMatcher,
        bus: EventBus,
        source: HotelSource,
        backend: BackendClient,
        dispatcher: DealDispatcher,
        destination_delay: float = DEFAULT_DESTINATION_DELAY_SECONDS,
        cycle_interval_hours: float = DEFAULT_CYCLE_INTERVAL_HOURS,
        publish_timeout: float = DEFAULT_PUBLISH_TIMEOUT_SECONDS
    ):
        handles = {
            "engine": engine,
            "matcher": matcher,
            "bus": bus,
            "source": source,
            "backend": backend,
            "dispatcher": dispatcher
        }
        missing = [name for name, handle in handles.items() if handle is None]
        if missing:
            raise ConfigurationError(f"missing collaborator handles: {', '.join(missing)}")

        self.engine = engine
        self.matcher = matcher
        self.bus = bus
        self.source = source
        self.backend = backend
        self.dispatcher = dispatcher

        self.destination_delay = destination_delay
        self.cycle_interval_hours = cycle_interval_hours
        self.publish_timeout = publish_timeout

        self.running = False
        self.last_report: Optional[CycleReport] = None
        self._task: Optional[asyncio.Task] = None
        self._cycle_lock = asyncio.Lock()

    # ============================================
    # Lifecycle
    # ============================================

    async def start(self):
        """Start the scheduler loop as a background task"""
        if self.running:
            return
        self.running = True
        self._task = asyncio.create_task(self.run_forever())
        logger.info(
            f"Pipeline coordinator started (every {self.cycle_interval_hours}h, "
            f"{self.destination_delay}s between destinations)"
        )

    async def stop(self):
        """Stop the scheduler loop"""
        self.running = False

        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Pipeline coordinator stopped")

    async def run_forever(self):
        """Run one cycle immediately, then one per interval until stopped"""
        self.running = True
        interval = self.cycle_interval_hours * 3600

        while self.running:
            try:
                await self.run_cycle()
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.exception(f"Cycle failed: {e}")

            if not self.running:
                break
            try:
                await asyncio.sleep(interval)
            except asyncio.CancelledError:
                break

    # ============================================
    # Cycle
    # ============================================

    async def run_cycle(self) -> CycleReport:
        """
        Run one full pipeline cycle

        Returns:
            CycleReport with the cycle's counters
        """
        async with self._cycle_lock:
            report = CycleReport()
            logger.info("Starting deal cycle")
            await self.backend.log_activity("cycle_started", {"startedAt": report.started_at.isoformat()})

            try:
                watchlists = await self.backend.get_active_watchlists()
            except CollaboratorError as e:
                logger.error(f"Could not load watchlists, skipping cycle: {e}")
                await self.backend.log_activity("error", {"stage": "watchlists", "error": str(e)})
                return self._finish(report)

            groups = group_by_destination(watchlists)
            report.watchlist_count = len(watchlists)
            report.destination_count = len(groups)
            logger.info(f"Found {len(watchlists)} active watchlists across {len(groups)} destinations")

            policies: Dict[str, Optional[PreferencePolicy]] = {}

            for index, (destination, watchers) in enumerate(groups.items()):
                if index > 0 and self.destination_delay > 0:
                    await asyncio.sleep(self.destination_delay)

                try:
                    await self._process_destination(destination, watchers, policies, report)
                except FetchFailure as e:
                    logger.error(f"Fetch failed for {destination}: {e}")
                    report.failed_destinations.append(destination)
                    await self.backend.log_activity("error", {"destination": destination, "error": str(e)})
                except Exception as e:
                    logger.exception(f"Abandoning destination {destination}: {e}")
                    report.failed_destinations.append(destination)
                    await self.backend.log_activity("error", {"destination": destination, "error": str(e)})

            self._finish(report)
            await self.backend.log_activity("cycle_completed", self._summary(report))
            logger.info(
                f"Cycle complete: {report.hotels_scraped} hotels, {report.deals_found} deals, "
                f"{report.dispatched} dispatched, {report.digest_queued} queued for digest"
            )
            return report

    def _finish(self, report: CycleReport) -> CycleReport:
        report.finished_at = utcnow()
        self.last_report = report
        return report

    @staticmethod
    def _summary(report: CycleReport) -> Dict[str, Any]:
        return {
            "watchlistCount": report.watchlist_count,
            "destinationCount": report.destination_count,
            "hotelsScraped": report.hotels_scraped,
            "dealsFound": report.deals_found,
            "matches": report.matches,
            "dispatched": report.dispatched,
            "digestQueued": report.digest_queued,
            "failedDestinations": list(report.failed_destinations)
        }

    # ============================================
    # Destination
    # ============================================

    async def _process_destination(
        self,
        destination: str,
        watchers: List[Watchlist],
        policies: Dict[str, Optional[PreferencePolicy]],
        report: CycleReport
    ):
        first = watchers[0]
        hotels = await self.source.fetch_destination(destination, first.check_in_date, first.check_out_date)
        report.hotels_scraped += len(hotels)
        await self.backend.log_activity("scraped", {"destination": destination, "hotelCount": len(hotels)})

        deals = 0
        for hotel in hotels:
            for watcher in watchers:
                await self._publish(self.bus.publish_hotel_price(watcher.user_id, destination, hotel))

            verdict = self._score(hotel)
            if verdict is None:
                continue

            deals += 1
            report.deals_found += 1
            for watcher in watchers:
                await self._publish(self.bus.publish_deal_detected(watcher.user_id, destination, verdict))
                await self._match_and_route(verdict, watcher.user_id, policies, report)

        await self.backend.log_activity("analyzed", {"destination": destination, "dealsFound": deals})

    def _score(self, hotel: HotelSnapshot) -> Optional[DealVerdict]:
        try:
            return self.engine.evaluate(hotel)
        except StorageUnavailable as e:
            logger.warning(f"Skipping {hotel.name} ({hotel.hotel_id}): {e}")
            return None

    async def _match_and_route(
        self,
        verdict: DealVerdict,
        user_id: str,
        policies: Dict[str, Optional[PreferencePolicy]],
        report: CycleReport
    ):
        policy = await self._policy_for(user_id, policies)
        if policy is None:
            return

        match = self.matcher.match(verdict, policy, user_id)
        if match is None:
            return
        report.matches += 1

        if match.should_dispatch:
            await self._dispatch(match, report)
        elif await self._publish(self.bus.publish_digest_queued(match)):
            report.digest_queued += 1

    async def _policy_for(
        self,
        user_id: str,
        policies: Dict[str, Optional[PreferencePolicy]]
    ) -> Optional[PreferencePolicy]:
        # one lookup per user per cycle; failures are cached as None
        if user_id not in policies:
            try:
                policies[user_id] = await self.backend.get_preferences(user_id)
            except CollaboratorError as e:
                logger.warning(f"No preferences for user {user_id} this cycle: {e}")
                policies[user_id] = None
        return policies[user_id]

    async def _dispatch(self, match: MatchResult, report: CycleReport):
        try:
            await self.dispatcher.dispatch(match)
        except DispatchFailure as e:
            logger.error(f"Dispatch failed: {e}")
            return

        report.dispatched += 1
        await self.backend.log_activity("email_sent", {
            "userId": match.user_id,
            "hotelName": match.deal.hotel.name,
            "matchScore": match.match_score,
            "urgency": match.urgency.value
        })

    async def _publish(self, publish) -> bool:
        """Await a publish coroutine with a timeout. Returns False on failure."""
        try:
            await asyncio.wait_for(publish, timeout=self.publish_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Publish timed out after {self.publish_timeout}s")
        except PublishFailure as e:
            logger.warning(f"Publish failed: {e}")
        return False
