"""
Tests for applicant collections

Tests cover:
- Stale-response guard on overlapping refreshes
- Write-then-invalidate: one refetch per status change
- Bulk transitions with partial failure
- Local stage validation before any request
"""

import asyncio
import json
from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from simhire.schemas import Envelope, InternshipApplicationResponse
from simhire.services.api_client import (
    BulkTransitionError,
    ClientSession,
    DomainError,
    NetworkError,
    SimHireClient,
    ValidationError,
)
from simhire.services.collections import ApplicantPipeline, CollectionCache
from simhire.services.filters import ApplicationFilter
from simhire.services.pipeline import ApplicationKind


def internship_app(app_id, stage="applied", name="Candidate"):
    return InternshipApplicationResponse(
        id=app_id,
        internship_id="int-1",
        candidate_name=name,
        candidate_email=f"{app_id}@example.com",
        university="Universitas Indonesia",
        major="Ilmu Komputer",
        semester=5,
        gpa=3.4,
        stage=stage,
        applied_at=datetime(2026, 1, 1),
    )


@pytest.fixture
def mock_client():
    client = MagicMock(spec=SimHireClient)
    client.list_company_applications = AsyncMock(return_value=[])
    client.list_company_internship_applications = AsyncMock(return_value=[])
    client.update_application_status = AsyncMock(return_value=Envelope(success=True))
    client.update_internship_application_status = AsyncMock(return_value=Envelope(success=True))
    return client


class TestCollectionCache:
    """Snapshot replacement and the stale-response guard."""

    @pytest.mark.asyncio
    async def test_refresh_replaces_snapshot(self):
        cache = CollectionCache()
        items = await cache.refresh(AsyncMock(return_value=[1, 2]))

        assert items == [1, 2]
        assert cache.items == [1, 2]
        assert cache.stale is False
        assert cache.refresh_count == 1

    @pytest.mark.asyncio
    async def test_invalidate_marks_stale(self):
        cache = CollectionCache()
        await cache.refresh(AsyncMock(return_value=[1]))
        cache.invalidate()
        assert cache.stale is True
        assert cache.items == [1]

    @pytest.mark.asyncio
    async def test_older_response_discarded(self):
        cache = CollectionCache()
        slow_gate = asyncio.Event()

        async def slow_fetch():
            await slow_gate.wait()
            return ["old"]

        async def fast_fetch():
            return ["new"]

        slow = asyncio.create_task(cache.refresh(slow_fetch))
        await asyncio.sleep(0)
        await cache.refresh(fast_fetch)
        slow_gate.set()
        await slow

        assert cache.items == ["new"]
        assert cache.discarded_count == 1
        assert cache.applied_generation == 2

    @pytest.mark.asyncio
    async def test_failed_fetch_leaves_snapshot(self):
        cache = CollectionCache()
        await cache.refresh(AsyncMock(return_value=[1]))
        cache.invalidate()

        with pytest.raises(DomainError):
            await cache.refresh(AsyncMock(side_effect=DomainError("down", status=503)))

        assert cache.items == [1]
        assert cache.stale is True


class TestRequestTransition:
    """Single status change."""

    @pytest.mark.asyncio
    async def test_sends_then_refetches_once(self, mock_client):
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)
        await pipeline.request_transition("app-1", "interview", note="Call on Monday")

        mock_client.update_application_status.assert_awaited_once_with("app-1", "interview", "Call on Monday")
        assert mock_client.list_company_applications.await_count == 1
        assert pipeline.cache.refresh_count == 1

    @pytest.mark.asyncio
    async def test_same_stage_is_still_sent(self, mock_client):
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)
        await pipeline.request_transition("app-1", "applied")
        await pipeline.request_transition("app-1", "applied")

        assert mock_client.update_application_status.await_count == 2

    @pytest.mark.asyncio
    async def test_invalid_stage_rejected_locally(self, mock_client):
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.INTERNSHIP)

        with pytest.raises(ValidationError):
            await pipeline.request_transition("ia-1", "screening")

        mock_client.update_internship_application_status.assert_not_awaited()
        assert pipeline.cache.refresh_count == 0

    @pytest.mark.asyncio
    async def test_server_rejection_propagates_without_refetch(self, mock_client):
        mock_client.update_application_status.side_effect = DomainError("Application not found.", status=404)
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)

        with pytest.raises(DomainError):
            await pipeline.request_transition("missing", "offer")

        assert pipeline.cache.refresh_count == 0

    @pytest.mark.asyncio
    async def test_internship_kind_uses_internship_endpoint(self, mock_client):
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.INTERNSHIP, query={"internship_id": "int-1"})
        await pipeline.request_transition("ia-1", "reviewed")

        mock_client.update_internship_application_status.assert_awaited_once_with("ia-1", "reviewed", notes=None)
        mock_client.list_company_internship_applications.assert_awaited_once_with(internship_id="int-1")


class TestBulkTransition:
    """Concurrent status changes without atomicity."""

    @pytest.mark.asyncio
    async def test_one_failure_of_three(self):
        """Two changes persist, one aggregate error is raised, one refetch happens."""
        stages = {"ia-1": "reviewed", "ia-2": "reviewed", "ia-3": "reviewed"}
        fetches = []

        def handler(request):
            path = request.url.path
            if request.method == "PUT":
                app_id = path.split("/")[-2]
                if app_id == "ia-2":
                    return httpx.Response(500, json={"success": False, "message": "Database unavailable"})
                stages[app_id] = json.loads(request.content)["status"]
                return httpx.Response(200, json={"success": True, "data": {}})

            fetches.append(path)
            applications = [
                internship_app(app_id, stage).model_dump(mode="json") for app_id, stage in stages.items()
            ]
            return httpx.Response(200, json={"success": True, "data": {"applications": applications}})

        client = SimHireClient(
            ClientSession(token="company-token"),
            base_url="http://api.test/api",
            transport=httpx.MockTransport(handler),
        )
        pipeline = ApplicantPipeline(client, ApplicationKind.INTERNSHIP)

        with pytest.raises(BulkTransitionError) as exc_info:
            await pipeline.bulk_transition(["ia-1", "ia-2", "ia-3"], "accepted")
        await client.aclose()

        error = exc_info.value
        assert error.succeeded == ["ia-1", "ia-3"]
        assert list(error.failed) == ["ia-2"]
        assert isinstance(error.failed["ia-2"], DomainError)
        assert error.message == "1 of 3 status updates failed"

        assert stages == {"ia-1": "accepted", "ia-2": "reviewed", "ia-3": "accepted"}
        assert fetches == ["/api/internship-applications/company"]
        assert {a.id: a.stage.value for a in pipeline.items} == stages

    @pytest.mark.asyncio
    async def test_all_succeed(self, mock_client):
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)
        succeeded = await pipeline.bulk_transition(["a1", "a2"], "rejected")

        assert succeeded == ["a1", "a2"]
        assert mock_client.update_application_status.await_count == 2
        assert pipeline.cache.refresh_count == 1

    @pytest.mark.asyncio
    async def test_refetch_failure_keeps_aggregate_error(self, mock_client):
        mock_client.update_application_status.side_effect = [
            Envelope(success=True),
            DomainError("Database unavailable", status=500),
        ]
        mock_client.list_company_applications.side_effect = NetworkError("Connection refused")
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)

        with pytest.raises(BulkTransitionError) as exc_info:
            await pipeline.bulk_transition(["a1", "a2"], "offer")

        assert exc_info.value.succeeded == ["a1"]
        assert list(exc_info.value.failed) == ["a2"]
        assert isinstance(exc_info.value.__cause__, NetworkError)
        assert pipeline.cache.stale is True

    @pytest.mark.asyncio
    async def test_refetch_failure_after_full_success_propagates(self, mock_client):
        mock_client.list_company_applications.side_effect = NetworkError("Connection refused")
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)

        with pytest.raises(NetworkError):
            await pipeline.bulk_transition(["a1"], "offer")

    @pytest.mark.asyncio
    async def test_cancelled_send_counts_as_failure(self, mock_client):
        mock_client.update_application_status.side_effect = [
            Envelope(success=True),
            asyncio.CancelledError(),
        ]
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)

        with pytest.raises(BulkTransitionError) as exc_info:
            await pipeline.bulk_transition(["a1", "a2"], "rejected")

        assert exc_info.value.succeeded == ["a1"]
        assert isinstance(exc_info.value.failed["a2"], asyncio.CancelledError)

    @pytest.mark.asyncio
    async def test_duplicate_ids_sent_once(self, mock_client):
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)
        succeeded = await pipeline.bulk_transition(["a1", "a2", "a1"], "screening")

        assert succeeded == ["a1", "a2"]
        assert mock_client.update_application_status.await_count == 2

    @pytest.mark.asyncio
    async def test_invalid_stage_sends_nothing(self, mock_client):
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.JOB)

        with pytest.raises(ValidationError):
            await pipeline.bulk_transition(["a1", "a2"], "reviewed")

        mock_client.update_application_status.assert_not_awaited()
        assert pipeline.cache.refresh_count == 0


class TestPipelineViews:
    """Filtering and counting over the cached snapshot."""

    @pytest.mark.asyncio
    async def test_filtered_and_stats(self, mock_client):
        mock_client.list_company_internship_applications.return_value = [
            internship_app("ia-1", "applied", "Andi"),
            internship_app("ia-2", "interview", "Budi"),
            internship_app("ia-3", "interview", "Citra"),
        ]
        pipeline = ApplicantPipeline(mock_client, ApplicationKind.INTERNSHIP)
        await pipeline.load()

        interviewing = pipeline.filtered(ApplicationFilter(stage="interview"), order="name")
        assert [a.id for a in interviewing] == ["ia-2", "ia-3"]
        assert pipeline.stats() == {"applied": 1, "reviewed": 0, "interview": 2, "accepted": 0, "rejected": 0}
