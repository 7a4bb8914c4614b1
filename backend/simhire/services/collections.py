"""
Applicant Collections - client-side snapshots of server collections

The server is the system of record; these classes only hold the latest
fetched copy of an applicant list and keep it honest:

- Writes never touch the local copy. A status change is sent, then the
  whole collection is fetched again (write-then-invalidate).
- Each fetch is tagged with a generation number. A response that arrives
  after a newer fetch was started is dropped instead of overwriting the
  fresher snapshot.

Usage:
    pipeline = ApplicantPipeline(client, ApplicationKind.JOB)
    await pipeline.load()
    shortlisted = pipeline.filtered(ApplicationFilter(stage="interview"))
    await pipeline.bulk_transition(["a1", "a2"], "offer")
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, TypeVar

from simhire.schemas import Envelope
from simhire.services.api_client import ApiError, BulkTransitionError, SimHireClient, validate_stage
from simhire.services.filters import ApplicationFilter, filter_applications, sort_applications
from simhire.services.pipeline import ApplicationKind, policy_for
from simhire.services.stats import count_by_stage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionCache(Generic[T]):
    """Latest snapshot of one collection, with a stale-response guard."""

    def __init__(self):
        self.items: List[T] = []
        self.generation = 0
        self.applied_generation = 0
        self.stale = True
        self.refresh_count = 0
        self.discarded_count = 0

    def invalidate(self) -> None:
        self.stale = True

    async def refresh(self, fetcher: Callable[[], Awaitable[List[T]]]) -> List[T]:
        """
        Fetch the collection and replace the snapshot.

        If another refresh started while this one was in flight, this
        response is older than the newest request and is discarded.
        Errors from `fetcher` propagate and leave the snapshot stale.
        """
        self.generation += 1
        generation = self.generation
        self.refresh_count += 1

        items = await fetcher()

        if generation < self.generation:
            self.discarded_count += 1
            logger.debug(
                f"Discarding stale response (generation {generation}, newest {self.generation})"
            )
            return self.items

        self.items = list(items)
        self.applied_generation = generation
        self.stale = False
        return self.items


class ApplicantPipeline:
    """
    One company's applicant list for a single application kind.

    Binds the REST client, the stage policy for `kind` and a collection
    cache. Status changes go through here so every write is followed by
    exactly one refetch.
    """

    def __init__(
        self,
        client: SimHireClient,
        kind: ApplicationKind = ApplicationKind.JOB,
        cache: Optional[CollectionCache] = None,
        query: Optional[Dict[str, Any]] = None,
    ):
        self.client = client
        self.kind = kind
        self.policy = policy_for(kind)
        self.cache = cache if cache is not None else CollectionCache()
        self.query = query or {}

    @property
    def items(self) -> List[Any]:
        return self.cache.items

    async def _fetch(self) -> List[Any]:
        if self.kind == ApplicationKind.INTERNSHIP:
            return await self.client.list_company_internship_applications(**self.query)
        return await self.client.list_company_applications(**self.query)

    async def load(self) -> List[Any]:
        return await self.cache.refresh(self._fetch)

    def filtered(self, criteria: Optional[ApplicationFilter] = None, order: Optional[str] = None) -> List[Any]:
        items = filter_applications(self.cache.items, criteria)
        if order:
            items = sort_applications(items, order)
        return items

    def stats(self) -> Dict[str, int]:
        return count_by_stage(self.cache.items, self.policy.stages)

    async def _send(self, application_id: str, stage: str, note: Optional[str]) -> Envelope:
        if self.kind == ApplicationKind.INTERNSHIP:
            return await self.client.update_internship_application_status(
                application_id, stage, notes=note
            )
        return await self.client.update_application_status(application_id, stage, note)

    async def request_transition(
        self,
        application_id: str,
        new_stage: Any,
        note: Optional[str] = None,
    ) -> Envelope:
        """
        Move one application to `new_stage`, then refetch the collection.

        Raises:
            ValidationError: `new_stage` is not in this kind's vocabulary
                (nothing is sent)
            ApiError: the server rejected the change (nothing is refetched)
        """
        stage = validate_stage(self.policy, new_stage)
        envelope = await self._send(application_id, stage, note)

        self.cache.invalidate()
        await self.load()
        return envelope

    async def bulk_transition(
        self,
        application_ids: List[str],
        new_stage: Any,
        note: Optional[str] = None,
    ) -> List[str]:
        """
        Move several applications at once.

        One request per id is issued concurrently. After all of them settle
        the collection is refetched once. Changes that succeeded stay
        applied even when others fail.

        Returns:
            Ids whose status change was accepted

        Raises:
            ValidationError: `new_stage` is invalid (nothing is sent)
            BulkTransitionError: at least one request failed (a refetch
                error, if any, is chained as its cause)
            ApiError: every request succeeded but the refetch failed
        """
        stage = validate_stage(self.policy, new_stage)
        # Each application is sent once even if listed twice
        unique_ids = list(dict.fromkeys(application_ids))

        outcomes = await asyncio.gather(
            *(self._send(app_id, stage, note) for app_id in unique_ids),
            return_exceptions=True,
        )

        succeeded: List[str] = []
        failed: Dict[str, BaseException] = {}
        for app_id, outcome in zip(unique_ids, outcomes):
            if isinstance(outcome, BaseException):
                failed[app_id] = outcome
            else:
                succeeded.append(app_id)

        self.cache.invalidate()
        try:
            await self.load()
        except ApiError as refetch_error:
            if not failed:
                raise
            logger.warning(f"Refetch after bulk move to {stage} failed: {refetch_error}")
            raise BulkTransitionError(succeeded, failed) from refetch_error

        if failed:
            logger.warning(
                f"Bulk move to {stage}: {len(failed)} of {len(unique_ids)} failed"
            )
            raise BulkTransitionError(succeeded, failed)
        return succeeded
