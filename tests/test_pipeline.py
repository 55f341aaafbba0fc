"""Tests for the listing pipeline orchestration."""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from listing_alerts.matching.engine import ProfileMatcher
from listing_alerts.matching.models import ProfileMatch
from listing_alerts.normalization.exceptions import MalformedInputError
from listing_alerts.notifications.models import NotificationResult
from listing_alerts.notifications.service import NotificationService
from listing_alerts.pipeline import ListingPipeline, PipelineRunResult
from listing_alerts.profiles.exceptions import ProfileSourceError
from listing_alerts.profiles.source import StaticProfileSource
from listing_alerts.realworks.client import RealworksClient
from listing_alerts.realworks.exceptions import ListingFetchHTTPError


@pytest.fixture
def other_profile(sample_profile):
    return sample_profile.model_copy(
        update={"id": "2", "name": "Jan", "hard_criteria": sample_profile.hard_criteria.model_copy(
            update={"cities": ["Rotterdam"]}
        )}
    )


@pytest.fixture
def realworks_client(raw_listing):
    client = Mock(spec=RealworksClient)
    client.fetch_listing.return_value = raw_listing
    return client


@pytest.fixture
def notification_service():
    service = Mock(spec=NotificationService)
    service.send_notifications.side_effect = lambda matches, listing: [
        NotificationResult(
            profile_id=m.profile.id,
            listing_id=listing.id,
            attempts=1,
            status="sent",
            message_id=f"wamid.{m.profile.id}",
        )
        for m in matches
    ]
    return service


@pytest.fixture
def pipeline(sample_profile, other_profile, notification_service, realworks_client):
    return ListingPipeline(
        profile_source=StaticProfileSource([sample_profile, other_profile]),
        matcher=ProfileMatcher(),
        notification_service=notification_service,
        realworks_client=realworks_client,
    )


class TestProcessListing:
    def test_matches_and_notifies(self, pipeline, raw_listing, notification_service):
        result = pipeline.process_listing(raw_listing)

        assert result.listing_id == "rw-1001"
        assert result.profiles_evaluated == 2
        assert result.total_matched == 1
        assert result.matches[0].profile.id == "1"
        assert result.matches[0].score == 100
        assert result.total_notified == 1
        assert result.total_failed == 0
        assert not result.had_errors
        assert len(result.event_id) == 32

        matches, listing = notification_service.send_notifications.call_args[0]
        assert [m.profile.id for m in matches] == ["1"]
        assert listing.city == "Schiedam"

    def test_no_matches(self, pipeline, raw_listing, notification_service):
        raw_listing["financieel"]["overdracht"]["koopprijs"] = 600000

        result = pipeline.process_listing(raw_listing)

        assert result.total_matched == 0
        assert result.notification_results == []
        notification_service.send_notifications.assert_called_once()

    def test_sparse_listing_is_processed(self, pipeline):
        result = pipeline.process_listing({})

        assert result.listing_id is None
        assert result.total_matched == 0

    def test_malformed_input_propagates(self, pipeline, notification_service):
        with pytest.raises(MalformedInputError):
            pipeline.process_listing(["not", "a", "listing"])

        notification_service.send_notifications.assert_not_called()

    def test_profile_source_error_propagates(self, notification_service, raw_listing):
        source = Mock()
        source.load.side_effect = ProfileSourceError("profiles.yaml missing")
        pipeline = ListingPipeline(source, ProfileMatcher(), notification_service)

        with pytest.raises(ProfileSourceError):
            pipeline.process_listing(raw_listing)

    def test_profiles_reloaded_per_event(self, sample_profile, notification_service, raw_listing):
        source = Mock()
        source.load.return_value = [sample_profile]
        pipeline = ListingPipeline(source, ProfileMatcher(), notification_service)

        pipeline.process_listing(raw_listing)
        pipeline.process_listing(raw_listing)

        assert source.load.call_count == 2

    def test_failed_notification_marks_errors(self, pipeline, raw_listing, notification_service):
        notification_service.send_notifications.side_effect = lambda matches, listing: [
            NotificationResult(m.profile.id, listing.id, attempts=1, status="failed", error="HTTP 400")
            for m in matches
        ]

        result = pipeline.process_listing(raw_listing)

        assert result.total_failed == 1
        assert result.had_errors


class TestProcessObjectUrl:
    def test_fetches_then_processes(self, pipeline, realworks_client):
        url = "https://api.realworks.nl/wonen/v3/objecten/rw-1001"

        result = pipeline.process_object_url(url)

        realworks_client.fetch_listing.assert_called_once_with(url)
        assert result.listing_id == "rw-1001"
        assert result.total_notified == 1

    def test_fetch_error_propagates(self, pipeline, realworks_client, notification_service):
        realworks_client.fetch_listing.side_effect = ListingFetchHTTPError(
            "HTTP 404", status_code=404, url="https://x"
        )

        with pytest.raises(ListingFetchHTTPError):
            pipeline.process_object_url("https://x")

        notification_service.send_notifications.assert_not_called()

    def test_requires_client(self, sample_profile, notification_service):
        pipeline = ListingPipeline(
            StaticProfileSource([sample_profile]), ProfileMatcher(), notification_service
        )

        with pytest.raises(RuntimeError, match="Realworks client"):
            pipeline.process_object_url("https://x")


class TestPipelineRunResult:
    def test_duration_computed_from_timestamps(self):
        started = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        result = PipelineRunResult(
            event_id="abc",
            run_started_at=started,
            run_finished_at=started + timedelta(seconds=2.5),
        )

        assert result.total_duration_seconds == 2.5

    def test_counts(self, sample_profile):
        started = datetime.now(timezone.utc)
        result = PipelineRunResult(
            event_id="abc",
            run_started_at=started,
            run_finished_at=started,
            matches=[ProfileMatch(sample_profile, 90)] * 3,
            notification_results=[
                NotificationResult("1", "rw-1", attempts=1, status="sent"),
                NotificationResult("2", "rw-1", attempts=0, status="skipped"),
                NotificationResult("3", "rw-1", attempts=2, status="failed"),
            ],
        )

        assert result.total_matched == 3
        assert result.total_notified == 1
        assert result.total_skipped == 1
        assert result.total_failed == 1
        assert result.had_errors
