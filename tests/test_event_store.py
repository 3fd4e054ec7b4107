"""Tests for the event store: mutations, range queries and cache discipline."""

import threading
from datetime import date, datetime, timedelta, timezone

import pytest

from lightning_calendar.data import EventStore
from lightning_calendar.domain import (
    DuplicateIdError,
    DuplicatePolicy,
    MissingPolicy,
    NotFoundError,
    ValidationError,
)

from conftest import make_event


JAN_15 = datetime(2025, 1, 15, 0, 0)
JAN_15_END = datetime(2025, 1, 15, 23, 59, 59)


# ─────────────────────────────────────────────────────────────────────────────
# Mutations
# ─────────────────────────────────────────────────────────────────────────────


class TestAddEvent:
    """Tests for add_event and lookups."""

    def test_add_and_get(self, store, room_booking):
        stored = store.add_event(room_booking)

        assert store.get_event("A") is stored
        assert "A" in store
        assert len(store) == 1

    def test_unknown_id_lookup(self, store):
        assert store.get_event("missing") is None
        with pytest.raises(NotFoundError):
            store.require_event("missing")

    def test_get_all_events_keeps_insertion_order(self, store):
        for event_id in ("c", "a", "b"):
            store.add_event(make_event(event_id, datetime(2025, 1, 15, 9)))

        assert [event.id for event in store.get_all_events()] == ["c", "a", "b"]

    def test_invalid_event_leaves_store_untouched(self, store):
        with pytest.raises(ValidationError):
            store.add_event({"id": "x", "start": datetime(2025, 1, 15, 9)})

        assert len(store) == 0

    def test_duplicate_is_rejected_by_default(self, store, room_booking):
        store.add_event(room_booking)

        with pytest.raises(DuplicateIdError):
            store.add_event({**room_booking, "title": "Renamed"})

        assert store.get_event("A").title == "Product Workshop"

    def test_duplicate_overwrites_when_configured(self, settings, room_booking):
        store = EventStore(settings=settings, duplicate_policy=DuplicatePolicy.OVERWRITE)
        store.add_event(room_booking)
        store.add_event(make_event("other", datetime(2025, 1, 16, 9)))

        store.add_event({**room_booking, "title": "Renamed"})

        assert len(store) == 2
        assert store.get_event("A").title == "Renamed"
        assert [event.id for event in store.get_all_events()] == ["A", "other"]


class TestAddEvents:
    """Tests for atomic batch insertion."""

    def test_batch_is_stored(self, store):
        events = store.add_events([make_event(str(i), datetime(2025, 1, 15, 9 + i)) for i in range(3)])

        assert [event.id for event in events] == ["0", "1", "2"]
        assert len(store) == 3

    def test_one_invalid_item_rejects_the_batch(self, store):
        batch = [
            make_event("ok", datetime(2025, 1, 15, 9)),
            {"id": "bad", "title": "Bad", "start": datetime(2025, 1, 15, 10), "end": datetime(2025, 1, 15, 9)},
        ]

        with pytest.raises(ValidationError) as exc_info:
            store.add_events(batch)

        assert len(store) == 0
        assert exc_info.value.errors[0]["index"] == 1

    def test_duplicate_inside_batch_is_rejected(self, store):
        batch = [make_event("same", datetime(2025, 1, 15, 9)), make_event("same", datetime(2025, 1, 15, 11))]

        with pytest.raises(ValidationError):
            store.add_events(batch)

        assert len(store) == 0

    def test_batch_invalidates_cached_ranges(self, store):
        assert store.get_events_in_range(JAN_15, JAN_15_END) == []

        store.add_events([make_event("a", datetime(2025, 1, 15, 9)), make_event("b", datetime(2025, 1, 15, 13))])

        assert [event.id for event in store.get_events_in_range(JAN_15, JAN_15_END)] == ["a", "b"]
        assert store.get_stats()["cache"]["invalidations"] == 1


class TestUpdateAndRemove:
    """Tests for update_event and remove_event."""

    def test_update_changes_fields(self, store, room_booking):
        store.add_event(room_booking)

        updated = store.update_event("A", {"title": "Design Review", "category": "review"})

        assert updated.title == "Design Review"
        assert updated.categories == ("review",)
        assert updated.attendees == store.get_event("A").attendees
        assert store.get_event("A") is updated

    def test_update_moves_event_between_ranges(self, store, room_booking):
        store.add_event(room_booking)
        assert len(store.get_events_in_range(JAN_15, JAN_15_END)) == 1

        store.update_event("A", {"start": datetime(2025, 1, 16, 14), "end": datetime(2025, 1, 16, 15)})

        assert store.get_events_in_range(JAN_15, JAN_15_END) == []
        assert len(store.get_events_in_range(date(2025, 1, 16), date(2025, 1, 16))) == 1

    def test_update_unknown_id_raises(self, store):
        with pytest.raises(NotFoundError):
            store.update_event("missing", {"title": "x"})

    def test_invalid_update_keeps_previous_event(self, store, room_booking):
        store.add_event(room_booking)

        with pytest.raises(ValidationError):
            store.update_event("A", {"end": datetime(2025, 1, 15, 13)})

        assert store.get_event("A").end == datetime(2025, 1, 15, 16)

    def test_remove_existing(self, store, room_booking):
        store.add_event(room_booking)

        assert store.remove_event("A") is True
        assert store.get_event("A") is None
        assert store.get_events_in_range(JAN_15, JAN_15_END) == []

    def test_remove_between_identical_queries(self, store, room_booking):
        """A removal between two identical queries is never served from the stale entry."""
        store.add_event(room_booking)
        assert [event.id for event in store.get_events_in_range(JAN_15, JAN_15_END)] == ["A"]

        store.remove_event("A")

        assert store.get_events_in_range(JAN_15, JAN_15_END) == []
        cache = store.get_stats()["cache"]
        assert cache["invalidations"] == 1
        assert cache["hits"] == 0

    def test_remove_unknown_is_ignored_by_default(self, store):
        assert store.remove_event("missing") is False

    def test_remove_unknown_raises_when_configured(self, settings):
        store = EventStore(settings=settings, missing_policy=MissingPolicy.RAISE)

        with pytest.raises(NotFoundError):
            store.remove_event("missing")


# ─────────────────────────────────────────────────────────────────────────────
# Range queries
# ─────────────────────────────────────────────────────────────────────────────


class TestGetEventsInRange:
    """Tests for get_events_in_range."""

    def test_results_sorted_by_start_then_id(self, store):
        store.add_event(make_event("b", datetime(2025, 1, 15, 9)))
        store.add_event(make_event("a", datetime(2025, 1, 15, 9)))
        store.add_event(make_event("c", datetime(2025, 1, 15, 8)))

        assert [event.id for event in store.get_events_in_range(JAN_15, JAN_15_END)] == ["c", "a", "b"]

    def test_event_ending_at_window_start_is_excluded(self, store):
        store.add_event(make_event("early", datetime(2025, 1, 15, 10)))

        assert store.get_events_in_range(datetime(2025, 1, 15, 11), datetime(2025, 1, 15, 12)) == []

    def test_event_starting_at_window_end_is_included(self, store):
        store.add_event(make_event("late", datetime(2025, 1, 15, 12)))

        result = store.get_events_in_range(datetime(2025, 1, 15, 11), datetime(2025, 1, 15, 12))

        assert [event.id for event in result] == ["late"]

    def test_multi_day_event_appears_on_each_day(self, store):
        store.add_event(make_event("trip", datetime(2025, 1, 14, 18), minutes=60 * 40))

        for day in (14, 15, 16):
            assert len(store.get_events_in_range(date(2025, 1, day), date(2025, 1, day))) == 1
        assert store.get_events_in_range(date(2025, 1, 17), date(2025, 1, 17)) == []

    def test_all_day_event_covers_whole_day(self, store):
        store.add_event({"id": "holiday", "title": "Holiday", "start": date(2025, 1, 15), "allDay": True})

        assert len(store.get_events_in_range(datetime(2025, 1, 15, 23), datetime(2025, 1, 15, 23, 30))) == 1
        assert store.get_events_in_range(date(2025, 1, 16), date(2025, 1, 16)) == []

    def test_recurring_occurrences_are_expanded(self, store, weekday_standup):
        store.add_event(weekday_standup)

        result = store.get_events_in_range(datetime(2025, 1, 13), datetime(2025, 1, 19, 23, 59, 59))

        assert len(result) == 5
        assert store.get_event(result[0].id) is None

    def test_range_monotonicity(self, store, room_booking, clashing_booking, weekday_standup):
        """A wider window never yields fewer events than a narrower one inside it."""
        store.add_events([room_booking, clashing_booking, weekday_standup])

        narrow = {event.id for event in store.get_events_in_range(datetime(2025, 1, 15, 9), datetime(2025, 1, 15, 15))}
        wide = {event.id for event in store.get_events_in_range(datetime(2025, 1, 14), datetime(2025, 1, 16))}

        assert narrow <= wide
        assert {"A", "B", "standup_20250115T090000"} <= wide

    def test_far_apart_offsets_still_match(self, store):
        """Aware bounds match events recorded under a distant UTC offset."""
        kiribati = timezone(timedelta(hours=14))
        baker = timezone(timedelta(hours=-12))
        store.add_event(make_event("x", datetime(2025, 1, 16, 1, 0, tzinfo=kiribati)))

        result = store.get_events_in_range(
            datetime(2025, 1, 14, 0, 0, tzinfo=baker), datetime(2025, 1, 14, 23, 59, tzinfo=baker)
        )

        assert [event.id for event in result] == ["x"]

    def test_start_after_end_is_rejected(self, store):
        with pytest.raises(ValidationError):
            store.get_events_in_range(datetime(2025, 1, 16), datetime(2025, 1, 15))

    def test_iso_string_bounds(self, store, room_booking):
        store.add_event(room_booking)

        assert len(store.get_events_in_range("2025-01-15T00:00:00", "2025-01-15T23:59:59")) == 1

    def test_bad_bound_raises_validation_error(self, store):
        with pytest.raises(ValidationError):
            store.get_events_in_range("soon", "later")

    def test_returned_list_is_a_copy(self, store, room_booking):
        store.add_event(room_booking)
        store.get_events_in_range(JAN_15, JAN_15_END).clear()

        assert len(store.get_events_in_range(JAN_15, JAN_15_END)) == 1


# ─────────────────────────────────────────────────────────────────────────────
# Cache behaviour
# ─────────────────────────────────────────────────────────────────────────────


class TestRangeCache:
    """Tests for the per-store query cache."""

    def test_repeat_query_hits_cache(self, store, room_booking):
        store.add_event(room_booking)

        first = store.get_events_in_range(JAN_15, JAN_15_END)
        second = store.get_events_in_range(JAN_15, JAN_15_END)

        cache = store.get_stats()["cache"]
        assert first == second
        assert (cache["hits"], cache["misses"]) == (1, 1)

    def test_mutation_inside_range_invalidates(self, store, room_booking, clashing_booking):
        store.add_event(room_booking)
        store.get_events_in_range(JAN_15, JAN_15_END)

        store.add_event(clashing_booking)
        result = store.get_events_in_range(JAN_15, JAN_15_END)

        assert [event.id for event in result] == ["A", "B"]
        assert store.get_stats()["cache"]["misses"] == 2

    def test_mutation_outside_range_keeps_entry(self, store, room_booking):
        store.get_events_in_range(JAN_15, JAN_15_END)

        store.add_event(make_event("feb", datetime(2025, 2, 20, 9)))
        store.get_events_in_range(JAN_15, JAN_15_END)

        cache = store.get_stats()["cache"]
        assert cache["hits"] == 1
        assert cache["invalidations"] == 0

    def test_recurring_template_invalidates_later_ranges(self, store, weekday_standup):
        store.get_events_in_range(datetime(2025, 3, 3), datetime(2025, 3, 3, 23, 59))

        store.add_event(weekday_standup)

        assert len(store.get_events_in_range(datetime(2025, 3, 3), datetime(2025, 3, 3, 23, 59))) == 1

    def test_capacity_evicts(self, settings):
        store = EventStore(settings=settings, capacity=2)
        for day in (13, 14, 15):
            store.get_events_in_range(date(2025, 1, day), date(2025, 1, day))

        cache = store.get_stats()["cache"]
        assert cache["evictions"] == 1
        assert cache["size"] == 2

    def test_stores_do_not_share_caches(self, settings, room_booking):
        first = EventStore(settings=settings)
        second = EventStore(settings=settings)
        first.add_event(room_booking)

        first.get_events_in_range(JAN_15, JAN_15_END)

        assert second.get_events_in_range(JAN_15, JAN_15_END) == []
        assert second.get_stats()["cache"]["hits"] == 0

    def test_concurrent_reads_compute_once(self, store, room_booking):
        """Racing reads of one uncached key produce a single miss."""
        store.add_event(room_booking)
        barrier = threading.Barrier(8)
        results = []

        def worker():
            barrier.wait()
            results.append(store.get_events_in_range(JAN_15, JAN_15_END))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        cache = store.get_stats()["cache"]
        assert (cache["hits"], cache["misses"]) == (7, 1)
        assert all(result == results[0] for result in results)


class TestStats:
    """Tests for get_stats and clear."""

    def test_stats_shape(self, store, room_booking, weekday_standup):
        store.add_events([room_booking, weekday_standup])

        stats = store.get_stats()

        assert stats["total_events"] == 2
        assert stats["by_recurring"] == {"recurring": 1, "non_recurring": 1}
        assert stats["cache"]["capacity"] == 128
        assert stats["cache"]["policy"] == "lru"

    def test_clear_resets_everything(self, store, room_booking):
        store.add_event(room_booking)
        store.get_events_in_range(JAN_15, JAN_15_END)
        store.get_events_in_range(JAN_15, JAN_15_END)

        store.clear()

        stats = store.get_stats()
        assert stats["total_events"] == 0
        assert stats["cache"]["hits"] == 0
        assert stats["cache"]["misses"] == 0
        assert stats["cache"]["size"] == 0
        assert store.get_all_events() == []
