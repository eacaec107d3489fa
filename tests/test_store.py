"""
Tests for ExpenseStore: CRUD, ordering, aggregates, persistence policy
and observer notification.
"""

import json
from datetime import date, datetime, timezone
from decimal import Decimal
from uuid import uuid4

import pytest

from conftest import RecordingPersistence, make_expense
from expense_tracker.audit import AuditLogger
from expense_tracker.config import Settings
from expense_tracker.models.audit import AuditEventType, AuditSeverity
from expense_tracker.models.expense import ExpenseCategory
from expense_tracker.services.storage import (
    CorruptDataError,
    InMemorySettingsStore,
    JsonFileSettingsStore,
    KeyValueExpensePersistence,
    encode_expenses,
)
from expense_tracker.store import ExpenseStore, create_store


def event_types(sink):
    return [event.event_type for event in sink.events]


class TestScenario:
    """The worked example: two expenses in January 2024."""

    def test_add_total_order_and_month(self, store):
        """Test totals, ordering and month filter after two additions."""
        a = make_expense("12.50", ExpenseCategory.FOOD, datetime(2024, 1, 5), "Lunch")
        b = make_expense("40.00", ExpenseCategory.BILLS, datetime(2024, 1, 10), "Phone")

        store.add_expense(a)
        store.add_expense(b)

        assert store.total_expenses == Decimal("52.50")
        assert list(store.expenses) == [b, a]
        assert store.total_for_category(ExpenseCategory.BILLS) == Decimal("40.00")
        assert store.expenses_for_month(datetime(2024, 1, 15)) == [b, a]

    def test_delete_by_id(self, store):
        """Test deleting B leaves only A."""
        a = make_expense("12.50", ExpenseCategory.FOOD, datetime(2024, 1, 5), "Lunch")
        b = make_expense("40.00", ExpenseCategory.BILLS, datetime(2024, 1, 10), "Phone")
        store.add_expense(a)
        store.add_expense(b)

        store.delete_expense(b)

        assert list(store.expenses) == [a]
        assert store.total_expenses == Decimal("12.50")


class TestAddExpense:
    """Tests for add_expense."""

    def test_size_matches_additions_and_sorted(self, store):
        """Test every addition is kept and the order stays newest first."""
        days = [5, 1, 20, 13, 7]
        for n, day in enumerate(days, start=1):
            store.add_expense(make_expense(when=datetime(2024, 3, day)))
            dates = [e.date for e in store.expenses]
            assert len(store) == n
            assert dates == sorted(dates, reverse=True)

    def test_equal_dates_keep_insertion_order(self, store):
        """Test ties on date keep their relative order."""
        when = datetime(2024, 2, 2)
        first = make_expense(when=when, description="first")
        second = make_expense(when=when, description="second")
        third = make_expense(when=when, description="third")
        older = make_expense(when=datetime(2024, 1, 1), description="older")

        for expense in (first, older, second, third):
            store.add_expense(expense)

        assert [e.description for e in store.expenses] == ["first", "second", "third", "older"]

    def test_time_of_day_orders_within_a_day(self, store):
        """Test later times on the same day come first."""
        morning = make_expense(when=datetime(2024, 2, 2, 8, 0))
        evening = make_expense(when=datetime(2024, 2, 2, 20, 0))
        store.add_expense(morning)
        store.add_expense(evening)

        assert list(store.expenses) == [evening, morning]

    def test_mixed_timezone_awareness_keeps_order(self, store, persistence):
        """Test naive and offset timestamps sort together instead of raising."""
        naive = make_expense(when=datetime(2024, 1, 5), description="naive")
        aware = make_expense(
            when=datetime(2024, 1, 10, tzinfo=timezone.utc), description="aware"
        )

        store.add_expense(naive)
        store.add_expense(aware)

        assert [e.description for e in store.expenses] == ["aware", "naive"]
        assert persistence.load() == list(store.expenses)

    def test_unvalidated_aware_copy_still_sorts(self, store):
        """Test a model_copy carrying a tzinfo is ordered by its instant."""
        naive = make_expense(when=datetime(2024, 1, 5), description="naive")
        aware = naive.model_copy(update={
            "id": uuid4(),
            "date": datetime(2024, 1, 10, tzinfo=timezone.utc),
            "description": "aware",
        })

        store.add_expense(naive)
        store.add_expense(aware)

        assert len(store) == 2
        assert [e.description for e in store.expenses] == ["aware", "naive"]

    def test_add_persists_whole_collection(self, store, persistence):
        """Test the persisted copy equals the in-memory collection."""
        store.add_expense(make_expense(when=datetime(2024, 1, 1)))
        store.add_expense(make_expense(when=datetime(2024, 1, 2)))

        assert persistence.load() == list(store.expenses)

    def test_add_is_audited(self, store, sink):
        """Test an expense_added event is recorded."""
        expense = make_expense()
        store.add_expense(expense)

        event = sink.events[-1]
        assert event.event_type == AuditEventType.EXPENSE_ADDED
        assert event.entity_id == expense.id

    def test_store_does_not_validate(self, store):
        """Test the store accepts records the form would reject."""
        odd = make_expense(amount="-5", description="")
        store.add_expense(odd)

        assert list(store.expenses) == [odd]


class TestUpdateExpense:
    """Tests for update_expense."""

    def test_replaces_matching_record_and_resorts(self, store):
        """Test an update replaces exactly one record and keeps the sort."""
        a = make_expense(when=datetime(2024, 1, 1), description="a")
        b = make_expense(when=datetime(2024, 1, 2), description="b")
        c = make_expense(when=datetime(2024, 1, 3), description="c")
        for expense in (a, b, c):
            store.add_expense(expense)

        moved = a.model_copy(update={"date": datetime(2024, 1, 10), "amount": Decimal("99")})
        store.update_expense(moved)

        assert list(store.expenses) == [moved, c, b]
        assert store.total_expenses == Decimal("119.00")

    def test_update_persists(self, store, persistence):
        """Test the update reaches persistence."""
        a = make_expense(description="before")
        store.add_expense(a)

        store.update_expense(a.model_copy(update={"description": "after"}))

        assert [e.description for e in persistence.load()] == ["after"]

    def test_missing_id_is_a_no_op(self, audit_logger, sink):
        """Test an unknown id changes nothing and saves nothing."""
        persistence = RecordingPersistence()
        store = ExpenseStore(persistence, audit_logger=audit_logger)
        store.add_expense(make_expense(description="kept"))
        before = store.expenses
        saves = persistence.save_calls
        notified = []
        store.subscribe(notified.append)

        store.update_expense(make_expense(description="stranger"))

        assert store.expenses == before
        assert persistence.save_calls == saves
        assert notified == []

    def test_missing_id_is_audited_as_warning(self, store, sink):
        """Test the skipped update leaves a warning in the audit trail."""
        stranger = make_expense()
        store.update_expense(stranger)

        event = sink.events[-1]
        assert event.event_type == AuditEventType.EXPENSE_UPDATE_SKIPPED
        assert event.severity == AuditSeverity.WARNING
        assert event.entity_id == stranger.id


class TestDeleteExpense:
    """Tests for delete_expense and delete_expenses."""

    def test_removes_every_record_with_the_id(self, audit_logger):
        """Test duplicated ids are all removed and others untouched."""
        dup = make_expense(when=datetime(2024, 1, 2))
        twin = dup.model_copy(update={"date": datetime(2024, 1, 3)})
        other = make_expense(when=datetime(2024, 1, 1))
        settings_store = InMemorySettingsStore({
            "SavedExpenses": encode_expenses([dup, twin, other]),
        })
        store = ExpenseStore(KeyValueExpensePersistence(settings_store), audit_logger=audit_logger)
        assert len(store) == 3

        store.delete_expense(dup)

        assert list(store.expenses) == [other]

    def test_deleting_unknown_id_keeps_collection(self, store):
        """Test an unknown id removes nothing."""
        kept = make_expense()
        store.add_expense(kept)

        store.delete_expense(make_expense())

        assert list(store.expenses) == [kept]

    def test_delete_persists(self, store, persistence):
        """Test deletion reaches persistence."""
        a = make_expense()
        store.add_expense(a)
        store.delete_expense(a)

        assert persistence.load() == []

    def test_delete_by_positions(self, store, persistence):
        """Test positions refer to the current newest-first order."""
        expenses = [make_expense(when=datetime(2024, 1, day)) for day in (1, 2, 3, 4)]
        for expense in expenses:
            store.add_expense(expense)
        # order is now day 4, 3, 2, 1

        store.delete_expenses({0, 2})

        assert list(store.expenses) == [expenses[2], expenses[0]]
        assert persistence.load() == list(store.expenses)

    def test_duplicate_positions_collapse(self, store):
        """Test repeated positions delete once."""
        a = make_expense(when=datetime(2024, 1, 1))
        b = make_expense(when=datetime(2024, 1, 2))
        store.add_expense(a)
        store.add_expense(b)

        store.delete_expenses([0, 0])

        assert list(store.expenses) == [a]

    def test_out_of_range_position_raises_and_keeps_collection(self, store):
        """Test invalid positions fail before anything is removed."""
        a = make_expense()
        store.add_expense(a)

        with pytest.raises(IndexError):
            store.delete_expenses([0, 1])
        with pytest.raises(IndexError):
            store.delete_expenses([-1])

        assert list(store.expenses) == [a]


class TestAggregates:
    """Tests for totals and month filtering."""

    def test_empty_totals_are_zero(self, store):
        """Test an empty store totals exactly zero."""
        assert store.total_expenses == 0
        assert store.total_expenses == Decimal("0")
        assert store.total_for_category(ExpenseCategory.FOOD) == 0

    def test_total_is_exact_decimal_sum(self, store):
        """Test amounts add without float drift."""
        for amount in ("0.10", "0.20", "0.30"):
            store.add_expense(make_expense(amount))

        assert store.total_expenses == Decimal("0.60")

    def test_total_for_category(self, store):
        """Test the category total only counts that category."""
        store.add_expense(make_expense("5.00", ExpenseCategory.FOOD))
        store.add_expense(make_expense("7.25", ExpenseCategory.FOOD))
        store.add_expense(make_expense("100.00", ExpenseCategory.SHOPPING))

        assert store.total_for_category(ExpenseCategory.FOOD) == Decimal("12.25")
        assert store.total_for_category(ExpenseCategory.SHOPPING) == Decimal("100.00")
        assert store.total_for_category(ExpenseCategory.HEALTHCARE) == 0

    def test_expenses_for_month_matches_year_and_month(self, store):
        """Test only the same year and month are returned."""
        first = make_expense(when=datetime(2024, 3, 1, 0, 0))
        last = make_expense(when=datetime(2024, 3, 31, 23, 59))
        before = make_expense(when=datetime(2024, 2, 29, 23, 59))
        after = make_expense(when=datetime(2024, 4, 1))
        other_year = make_expense(when=datetime(2023, 3, 15))
        for expense in (first, last, before, after, other_year):
            store.add_expense(expense)

        assert store.expenses_for_month(date(2024, 3, 10)) == [last, first]
        assert store.expenses_for_month(datetime(2023, 3, 1, 12)) == [other_year]
        assert store.expenses_for_month(date(2025, 3, 1)) == []


class TestPersistencePolicy:
    """Tests for load/save failure handling."""

    def test_missing_blob_starts_empty(self, store, sink):
        """Test nothing stored is not an error."""
        assert store.expenses == ()
        assert event_types(sink) == [AuditEventType.EXPENSES_LOADED]

    def test_loaded_expenses_are_sorted(self, audit_logger):
        """Test loading re-sorts newest first."""
        old = make_expense(when=datetime(2023, 1, 1))
        new = make_expense(when=datetime(2024, 1, 1))
        settings_store = InMemorySettingsStore({"SavedExpenses": encode_expenses([old, new])})

        store = ExpenseStore(KeyValueExpensePersistence(settings_store), audit_logger=audit_logger)

        assert list(store.expenses) == [new, old]

    def test_blob_mixing_naive_and_utc_dates_loads(self, audit_logger, sink):
        """Test a stored blob with both timestamp styles loads newest first."""
        blob = json.dumps([
            {
                "id": str(uuid4()),
                "amount": "3.00",
                "category": "food",
                "date": "2024-01-05T00:00:00",
                "description": "older",
                "notes": None,
            },
            {
                "id": str(uuid4()),
                "amount": "4.00",
                "category": "bills",
                "date": "2024-01-06T12:00:00Z",
                "description": "newer",
                "notes": None,
            },
        ])
        settings_store = InMemorySettingsStore({"SavedExpenses": blob})

        store = ExpenseStore(KeyValueExpensePersistence(settings_store), audit_logger=audit_logger)

        assert [e.description for e in store.expenses] == ["newer", "older"]
        assert all(e.date.tzinfo is None for e in store.expenses)
        assert event_types(sink) == [AuditEventType.EXPENSES_LOADED]

    def test_corrupt_blob_falls_back_to_empty(self, audit_logger, sink):
        """Test a malformed blob gives an empty store and a load_failed event."""
        settings_store = InMemorySettingsStore({"SavedExpenses": "{not json"})

        store = ExpenseStore(KeyValueExpensePersistence(settings_store), audit_logger=audit_logger)

        assert store.expenses == ()
        assert event_types(sink) == [AuditEventType.LOAD_FAILED]
        assert sink.events[0].severity == AuditSeverity.ERROR

    def test_load_error_from_persistence_is_absorbed(self, audit_logger, sink):
        """Test any storage error on load is absorbed."""
        persistence = RecordingPersistence(fail_load=CorruptDataError("bad"))

        store = ExpenseStore(persistence, audit_logger=audit_logger)

        assert store.expenses == ()
        assert sink.events[0].error_message == "bad"

    def test_save_failure_is_absorbed_and_audited(self, audit_logger, sink):
        """Test a failing save keeps memory correct and records save_failed."""
        persistence = RecordingPersistence(fail_save=True)
        store = ExpenseStore(persistence, audit_logger=audit_logger)
        expense = make_expense()

        store.add_expense(expense)

        assert list(store.expenses) == [expense]
        failures = [e for e in sink.events if e.event_type == AuditEventType.SAVE_FAILED]
        assert len(failures) == 1
        assert failures[0].error_message == "disk full"

    def test_every_mutation_saves(self, audit_logger):
        """Test add, update and delete each write once."""
        persistence = RecordingPersistence()
        store = ExpenseStore(persistence, audit_logger=audit_logger)
        expense = make_expense()

        store.add_expense(expense)
        store.update_expense(expense.model_copy(update={"amount": Decimal("1")}))
        store.delete_expense(expense)

        assert persistence.save_calls == 3

    def test_works_without_injected_logger(self):
        """Test the store falls back to a local-only audit logger."""
        store = ExpenseStore(RecordingPersistence(fail_save=True))
        store.add_expense(make_expense())

        assert len(store) == 1


class TestObservers:
    """Tests for change notification."""

    def test_observer_called_after_each_mutation(self, store):
        """Test observers receive the store once per mutation."""
        calls = []
        store.subscribe(calls.append)
        expense = make_expense()

        store.add_expense(expense)
        store.update_expense(expense.model_copy(update={"notes": "x"}))
        store.delete_expense(expense)
        store.add_expense(make_expense())
        store.delete_expenses([0])

        assert calls == [store] * 5

    def test_observer_sees_new_state(self, store):
        """Test the collection is already updated when observers run."""
        seen = []
        store.subscribe(lambda s: seen.append(len(s.expenses)))

        store.add_expense(make_expense())
        store.add_expense(make_expense())

        assert seen == [1, 2]

    def test_unsubscribe(self, store):
        """Test an unsubscribed observer is no longer called."""
        calls = []
        store.subscribe(calls.append)
        store.unsubscribe(calls.append)

        store.add_expense(make_expense())

        assert calls == []

    def test_failing_observer_does_not_block_others(self, store, sink):
        """Test a raising observer is audited and the rest still run."""
        def broken(_store):
            raise RuntimeError("boom")

        calls = []
        store.subscribe(broken)
        store.subscribe(calls.append)

        store.add_expense(make_expense())

        assert calls == [store]
        failed = [e for e in sink.events if e.event_type == AuditEventType.OBSERVER_FAILED]
        assert failed[0].details["observer"] == "broken"

    def test_snapshot_is_immutable(self, store):
        """Test readers cannot mutate the collection."""
        store.add_expense(make_expense())

        assert isinstance(store.expenses, tuple)


class TestCreateStore:
    """Tests for the create_store factory."""

    def test_uses_configured_settings_file(self, tmp_path, monkeypatch):
        """Test expenses survive a restart through the settings file."""
        path = tmp_path / "prefs" / "settings.json"
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_SETTINGS_PATH", str(path))
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_STORAGE_KEY", "Expenses")
        expense = make_expense("3.30", ExpenseCategory.EDUCATION, notes="book")

        first = create_store(Settings())
        first.add_expense(expense)

        second = create_store(Settings())
        assert list(second.expenses) == [expense]
        assert "Expenses" in json.loads(path.read_text(encoding="utf-8"))

    def test_corrupt_settings_file_starts_empty(self, tmp_path, monkeypatch, sink):
        """Test a garbage settings file yields an empty store, then saves fine."""
        path = tmp_path / "settings.json"
        path.write_text("garbage", encoding="utf-8")
        monkeypatch.setenv("EXPENSE_TRACKER_STORAGE_SETTINGS_PATH", str(path))

        store = create_store(Settings(), audit_logger=AuditLogger(sink))
        assert store.expenses == ()
        assert event_types(sink) == [AuditEventType.LOAD_FAILED]

        store.add_expense(make_expense())
        reloaded = KeyValueExpensePersistence(JsonFileSettingsStore(path)).load()
        assert reloaded == list(store.expenses)
