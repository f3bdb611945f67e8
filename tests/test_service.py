"""Tests for service layer."""

import pytest
from datetime import datetime, timezone

from shortener.exceptions import ErrorKind, ShortenerError
from shortener.events import EventKind
from shortener.service import URLShortenerService
from shortener.storage import InMemoryURLStore


class RecordingChannel:
    """Event channel double that keeps published events."""

    def __init__(self):
        self.events = []
        self.bound = True

    def publish(self, event):
        self.events.append(event)

    def kinds(self):
        return [event.kind for event in self.events]


class ExplodingChannel:
    """Event channel double whose publish always fails."""

    bound = True

    def publish(self, event):
        raise RuntimeError("transport down")


@pytest.fixture
def recorder():
    return RecordingChannel()


@pytest.fixture
def recording_service(store, short_code_generator, recorder, logger):
    return URLShortenerService(
        store=store,
        short_code_generator=short_code_generator,
        events=recorder,
        logger=logger,
    )


def assert_kind(exc_info, kind):
    assert exc_info.value.kind is kind


class TestCreate:
    """Test short URL creation."""

    def test_create_generated_code(self, service, sample_urls):
        """Generated codes are 7 alphanumeric characters."""
        result = service.create_short_url(sample_urls[0])

        assert len(result.short_code) == 7
        assert result.short_code.isalnum()
        assert result.long_url == sample_urls[0]
        assert result.click_count == 0
        assert result.long_url_click_count == 0
        assert result.created_at.tzinfo is not None
        assert service.store.exists(result.short_code)

    def test_create_normalizes_url(self, service):
        """The stored long URL is canonical."""
        result = service.create_short_url("HTTPS://Example.COM:443/Path/")

        assert result.long_url == "https://example.com/Path"
        assert service.store.get(result.short_code).long_url == "https://example.com/Path"

    def test_create_with_custom_code(self, service, sample_urls):
        """Test creating with custom code."""
        result = service.create_short_url(sample_urls[0], custom_code="test123")

        assert result.short_code == "test123"

    def test_custom_code_boundaries(self, service, sample_urls):
        """Custom codes must be 5-20 characters."""
        assert service.create_short_url(sample_urls[0], custom_code="short").short_code == "short"
        assert service.create_short_url(sample_urls[0], custom_code="a" * 20).short_code == "a" * 20

        with pytest.raises(ShortenerError) as exc_info:
            service.create_short_url(sample_urls[0], custom_code="shor")
        assert_kind(exc_info, ErrorKind.INVALID_INPUT)

        with pytest.raises(ShortenerError) as exc_info:
            service.create_short_url(sample_urls[0], custom_code="b" * 21)
        assert_kind(exc_info, ErrorKind.INVALID_INPUT)

    @pytest.mark.parametrize("code", ["my-code", "my_code", "my code", "cafés", ""])
    def test_custom_code_charset(self, service, sample_urls, code):
        """Only letters and digits are accepted; empty is not 'no code'."""
        with pytest.raises(ShortenerError) as exc_info:
            service.create_short_url(sample_urls[0], custom_code=code)
        assert_kind(exc_info, ErrorKind.INVALID_INPUT)
        assert len(service.store) == 0

    def test_create_duplicate_custom_code(self, service, sample_urls):
        """Test duplicate custom code rejection."""
        service.create_short_url(sample_urls[0], custom_code="duplicate")

        with pytest.raises(ShortenerError, match="'duplicate' already exists") as exc_info:
            service.create_short_url(sample_urls[1], custom_code="duplicate")

        assert_kind(exc_info, ErrorKind.DUPLICATE_CODE)
        assert exc_info.value.short_code == "duplicate"
        assert service.store.get("duplicate").long_url == sample_urls[0]

    def test_duplicate_custom_code_ignores_case(self, service, sample_urls):
        """'abcde' and 'ABCDE' are the same code."""
        service.create_short_url(sample_urls[0], custom_code="abcde")

        with pytest.raises(ShortenerError) as exc_info:
            service.create_short_url(sample_urls[1], custom_code="ABCDE")
        assert_kind(exc_info, ErrorKind.DUPLICATE_CODE)

    @pytest.mark.parametrize("url", ["not-a-url", "ftp://x.com", "", "javascript:alert(1)"])
    def test_invalid_url(self, service, url):
        """Test invalid URL rejection."""
        with pytest.raises(ShortenerError) as exc_info:
            service.create_short_url(url)
        assert_kind(exc_info, ErrorKind.INVALID_INPUT)

    def test_invalid_url_checked_before_custom_code(self, service):
        """A bad URL is reported even when the custom code is also bad."""
        with pytest.raises(ShortenerError, match="HTTP and HTTPS"):
            service.create_short_url("ftp://x.com", custom_code="-")

    def test_generated_collision_retries(self, store, fixed_code_generator, logger, sample_urls):
        """A collision is retried with a fresh code."""
        generator = fixed_code_generator(["taken01", "taken01", "fresh01"])
        service = URLShortenerService(store=store, short_code_generator=generator, logger=logger)

        assert service.create_short_url(sample_urls[0]).short_code == "taken01"
        assert service.create_short_url(sample_urls[1]).short_code == "fresh01"
        assert generator.calls == 3

    def test_generated_collision_exhausts_retries(self, store, fixed_code_generator, logger, sample_urls):
        """Five collisions in a row fail with a generic duplicate error."""
        generator = fixed_code_generator(["always1"])
        service = URLShortenerService(store=store, short_code_generator=generator, logger=logger)
        service.create_short_url(sample_urls[0])
        generator.calls = 0

        with pytest.raises(ShortenerError, match="Failed to generate a unique short code") as exc_info:
            service.create_short_url(sample_urls[1])

        assert_kind(exc_info, ErrorKind.DUPLICATE_CODE)
        assert exc_info.value.short_code is None
        assert generator.calls == 5
        assert len(store) == 1

    def test_retry_limit_is_configurable(self, store, fixed_code_generator, logger, sample_urls):
        """max_collision_retries bounds the attempts."""
        generator = fixed_code_generator(["always1"])
        service = URLShortenerService(
            store=store,
            short_code_generator=generator,
            logger=logger,
            max_collision_retries=2,
        )
        service.create_short_url(sample_urls[0])
        generator.calls = 0

        with pytest.raises(ShortenerError):
            service.create_short_url(sample_urls[1])
        assert generator.calls == 2

    def test_invalid_retry_limit(self, store):
        """At least one attempt is required."""
        with pytest.raises(ValueError):
            URLShortenerService(store=store, max_collision_retries=0)

    def test_create_reports_existing_aggregate(self, service):
        """A new code for a known destination starts with that destination's clicks."""
        first = service.create_short_url("https://example.com/x", custom_code="first01")
        service.resolve(first.short_code)
        service.resolve(first.short_code)

        second = service.create_short_url("https://EXAMPLE.com/x/", custom_code="second1")

        assert second.click_count == 0
        assert second.long_url_click_count == 2


class TestResolve:
    """Test resolution and click counting."""

    def test_resolve_increments(self, service, sample_urls):
        """Each resolve counts one click."""
        created = service.create_short_url(sample_urls[0])

        first = service.resolve(created.short_code)
        second = service.resolve(created.short_code)

        assert first.click_count == 1
        assert second.click_count == 2
        assert second.long_url == sample_urls[0]
        assert second.created_at == created.created_at
        assert service.get_stats(created.short_code).click_count == 2

    def test_resolve_case_insensitive(self, service, sample_urls):
        """Resolving with different case hits the same entry."""
        service.create_short_url(sample_urls[0], custom_code="AbCde")

        result = service.resolve("ABCDE")
        service.resolve("abcde")

        assert result.short_code == "AbCde"
        assert service.get_stats("AbCde").click_count == 2

    def test_resolve_for_redirect(self, service, sample_urls):
        """Redirect resolution returns only the URL but still counts."""
        created = service.create_short_url(sample_urls[1])

        assert service.resolve_for_redirect(created.short_code) == sample_urls[1]
        assert service.get_stats(created.short_code).click_count == 1

    def test_aggregate_scenario(self, service):
        """Two codes for the same destination share an aggregate."""
        alpha1 = service.create_short_url("https://EXAMPLE.com/x/", custom_code="alpha01")
        alpha2 = service.create_short_url("https://example.com/x", custom_code="alpha02")

        assert alpha1.long_url == alpha2.long_url == "https://example.com/x"

        r1 = service.resolve("alpha01")
        r2 = service.resolve("alpha02")

        assert r1.click_count == 1
        assert r2.click_count == 1
        assert r2.long_url_click_count == 2

        enriched = {r.short_code: r for r in service.list_all_urls()}
        assert enriched["alpha01"].long_url_click_count == 2
        assert enriched["alpha02"].long_url_click_count == 2

    def test_aggregate_sums_clicks(self, service):
        """k clicks on one code and m on another aggregate to k + m."""
        service.create_short_url("https://example.com/agg", custom_code="aggone1")
        service.create_short_url("https://example.com/agg", custom_code="aggtwo2")
        service.create_short_url("https://example.com/other", custom_code="other01")

        for _ in range(3):
            service.resolve("aggone1")
        for _ in range(4):
            service.resolve_for_redirect("aggtwo2")
        service.resolve("other01")

        assert service.aggregate_clicks("https://example.com/agg") == 7
        enriched = {r.short_code: r for r in service.list_all_urls()}
        assert enriched["aggone1"].long_url_click_count == 7
        assert enriched["aggtwo2"].long_url_click_count == 7
        assert enriched["other01"].long_url_click_count == 1

    @pytest.mark.parametrize("code", ["", "bad-code", "a" * 21, "a b"])
    def test_resolve_invalid_code(self, service, code):
        """Malformed codes are invalid input."""
        with pytest.raises(ShortenerError) as exc_info:
            service.resolve(code)
        assert_kind(exc_info, ErrorKind.INVALID_INPUT)

    def test_short_lookup_codes_allowed(self, service):
        """Lookups accept codes shorter than the custom minimum."""
        with pytest.raises(ShortenerError) as exc_info:
            service.resolve("a")
        assert_kind(exc_info, ErrorKind.NOT_FOUND)

    def test_not_found_everywhere(self, service):
        """Unknown codes are NOT_FOUND for resolve, redirect, stats and delete."""
        for operation in (
            service.resolve,
            service.resolve_for_redirect,
            service.get_stats,
            service.delete_short_url,
        ):
            with pytest.raises(ShortenerError, match="'nothere' not found") as exc_info:
                operation("nothere")
            assert_kind(exc_info, ErrorKind.NOT_FOUND)


class TestStatsAndDelete:
    """Test stats and deletion."""

    def test_stats_does_not_increment(self, service, sample_urls):
        """Stats are read-only."""
        created = service.create_short_url(sample_urls[0])

        stats = service.get_stats(created.short_code)
        stats = service.get_stats(created.short_code)

        assert stats.short_code == created.short_code
        assert stats.click_count == 0
        assert stats.created_at == created.created_at

    def test_delete(self, service, sample_urls):
        """Deleted codes are gone."""
        created = service.create_short_url(sample_urls[0])

        service.delete_short_url(created.short_code.upper())

        assert not service.store.exists(created.short_code)
        with pytest.raises(ShortenerError) as exc_info:
            service.delete_short_url(created.short_code)
        assert_kind(exc_info, ErrorKind.NOT_FOUND)

    def test_delete_frees_code(self, service, sample_urls):
        """A deleted custom code can be reused."""
        service.create_short_url(sample_urls[0], custom_code="reuse01")
        service.delete_short_url("reuse01")

        result = service.create_short_url(sample_urls[1], custom_code="reuse01")
        assert result.long_url == sample_urls[1]
        assert result.click_count == 0


class TestListing:
    """Test listing operations."""

    def test_list_all(self, service, sample_urls):
        """Every URL is listed."""
        for url in sample_urls:
            service.create_short_url(url)

        assert {r.long_url for r in service.list_all_urls()} == set(sample_urls)

    def test_list_paged(self, service):
        """Pages carry the total match count."""
        for i in range(7):
            service.create_short_url(f"https://example.com/page/{i}", custom_code=f"page{i:04d}")
        service.create_short_url("https://other.org/", custom_code="other01")

        page = service.list_paged_urls(offset=0, limit=3, search="EXAMPLE.com")

        assert page.total_count == 7
        assert len(page.items) == 3
        assert all("example.com" in r.long_url for r in page.items)

        tail = service.list_paged_urls(offset=6, limit=3, search="example.com")
        assert tail.total_count == 7
        assert len(tail.items) == 1

        everything = service.list_paged_urls(offset=0, limit=50)
        assert everything.total_count == 8

    def test_list_recent_newest_first(self, service):
        """Recent URLs come newest first."""
        for i in range(5):
            service.create_short_url(f"https://example.com/{i}", custom_code=f"recent{i}")

        recent = service.list_recent_urls(3)

        assert [r.short_code for r in recent] == ["recent4", "recent3", "recent2"]

    def test_listing_enriches(self, service):
        """Listed results carry aggregate clicks."""
        service.create_short_url("https://example.com/same", custom_code="same001")
        service.create_short_url("https://example.com/same", custom_code="same002")
        service.resolve("same001")

        for result in service.list_paged_urls(0, 10).items + service.list_recent_urls(10):
            assert result.long_url_click_count == 1

    def test_health_check(self, service, sample_urls):
        """Test health check."""
        service.create_short_url(sample_urls[0])
        health = service.health_check()

        assert health["overall"]
        assert health["store"]
        assert health["total_urls"] == 1
        assert health["events_bound"] is False

    def test_health_check_store_failure(self, unavailable_store, logger):
        """A failing store makes the service unhealthy instead of raising."""
        service = URLShortenerService(store=unavailable_store, logger=logger)

        health = service.health_check()

        assert health["store"] is False
        assert health["overall"] is False
        assert health["total_urls"] == 0


class TestNotifications:
    """Test events published by the service."""

    def test_created_event(self, recording_service, recorder):
        """Creation publishes the enriched result."""
        result = recording_service.create_short_url("https://example.com/e", custom_code="event01")

        assert recorder.kinds() == [EventKind.CREATED]
        data = recorder.events[0].data
        assert data["short_code"] == "event01"
        assert data["long_url"] == "https://example.com/e"
        assert data["long_url_click_count"] == 0
        assert data["created_at"] == result.created_at.isoformat()

    def test_clicked_event(self, recording_service, recorder):
        """Resolving publishes the new counts."""
        recording_service.create_short_url("https://example.com/e", custom_code="event01")
        recording_service.create_short_url("https://example.com/e", custom_code="event02")
        recording_service.resolve("event02")
        recording_service.resolve_for_redirect("EVENT01")

        clicked = [e for e in recorder.events if e.kind is EventKind.CLICKED]
        assert len(clicked) == 2
        assert clicked[-1].data == {
            "short_code": "event01",
            "click_count": 1,
            "long_url": "https://example.com/e",
            "long_url_click_count": 2,
        }

    def test_deleted_event(self, recording_service, recorder):
        """Deletion publishes the code."""
        recording_service.create_short_url("https://example.com/e", custom_code="event01")
        recording_service.delete_short_url("event01")

        assert recorder.events[-1].kind is EventKind.DELETED
        assert recorder.events[-1].data == {"short_code": "event01"}

    def test_failures_publish_nothing(self, recording_service, recorder):
        """Failed operations do not notify."""
        with pytest.raises(ShortenerError):
            recording_service.resolve("nothere")
        with pytest.raises(ShortenerError):
            recording_service.create_short_url("ftp://x.com")

        assert recorder.events == []

    def test_notification_failure_does_not_fail_operation(self, store, logger):
        """A broken channel never breaks the caller."""
        service = URLShortenerService(store=store, events=ExplodingChannel(), logger=logger)

        created = service.create_short_url("https://example.com/safe", custom_code="safe001")
        assert service.resolve("safe001").click_count == 1
        service.delete_short_url("safe001")

        assert created.short_code == "safe001"
        assert len(store) == 0

    def test_no_channel(self, store):
        """The service works without an event channel."""
        service = URLShortenerService(store=store)

        service.create_short_url("https://example.com", custom_code="quiet01")
        assert service.resolve("quiet01").click_count == 1
