"""Unit tests for InMemoryNotificationStore."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from modules.notifications.errors import ConflictError, NotFoundError
from modules.notifications.models import NotificationPatch, NotificationStatus
from modules.notifications.store import InMemoryNotificationStore
from tests.factories.notifications import make_notification, make_user

BASE = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryNotificationStore()


@pytest.mark.unit
class TestBasicOperations:
    def test_save_and_get(self, store):
        notification = make_notification()

        store.save(notification)

        assert store.get(notification.id) == notification

    def test_get_missing_returns_none(self, store):
        assert store.get("missing") is None

    def test_returned_copies_are_isolated(self, store):
        notification = store.save(make_notification())

        fetched = store.get(notification.id)
        fetched.status = NotificationStatus.SENT

        assert store.get(notification.id).status == NotificationStatus.PENDING

    def test_delete(self, store):
        notification = store.save(make_notification())

        assert store.delete(notification.id) is True
        assert store.delete(notification.id) is False
        assert store.get(notification.id) is None


@pytest.mark.unit
class TestApply:
    def test_apply_merges_patch(self, store):
        notification = store.save(make_notification())

        updated = store.apply(
            notification.id,
            NotificationPatch(status=NotificationStatus.SENT, sent_at=BASE),
        )

        assert updated.status == NotificationStatus.SENT
        assert updated.sent_at == BASE
        assert store.get(notification.id).status == NotificationStatus.SENT

    def test_apply_missing_raises_not_found(self, store):
        with pytest.raises(NotFoundError) as exc_info:
            store.apply("missing", NotificationPatch(status=NotificationStatus.SENT))

        assert exc_info.value.entity_id == "missing"

    def test_apply_with_unexpected_status_raises_conflict(self, store):
        notification = store.save(make_notification(status=NotificationStatus.DISMISSED))

        with pytest.raises(ConflictError) as exc_info:
            store.apply(
                notification.id,
                NotificationPatch(status=NotificationStatus.SENT, sent_at=BASE),
                expected_status={NotificationStatus.PENDING},
            )

        assert exc_info.value.actual_status == "DISMISSED"
        assert store.get(notification.id).status == NotificationStatus.DISMISSED

    def test_concurrent_conditional_updates_only_one_wins(self, store):
        notification = store.save(make_notification())
        outcomes = []

        def attempt():
            try:
                store.apply(
                    notification.id,
                    NotificationPatch(status=NotificationStatus.SENT, sent_at=BASE),
                    expected_status={NotificationStatus.PENDING},
                )
                outcomes.append("ok")
            except ConflictError:
                outcomes.append("conflict")

        threads = [threading.Thread(target=attempt) for _ in range(10)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert outcomes.count("ok") == 1
        assert outcomes.count("conflict") == 9


@pytest.mark.unit
class TestQueries:
    def test_find_due_selects_pending_at_or_before_now(self, store):
        due_early = store.save(make_notification(scheduled_at=BASE - timedelta(hours=1)))
        due_now = store.save(make_notification(scheduled_at=BASE))
        store.save(make_notification(scheduled_at=BASE + timedelta(seconds=1)))
        store.save(
            make_notification(
                scheduled_at=BASE - timedelta(hours=2),
                status=NotificationStatus.FAILED,
            )
        )

        due = store.find_due(BASE)

        assert [n.id for n in due] == [due_early.id, due_now.id]

    def test_find_by_user_and_document(self, store):
        mine = store.save(make_notification(user=make_user(user_id="u-1")))
        store.save(make_notification(user=make_user(user_id="u-2")))

        assert [n.id for n in store.find_by_user("u-1")] == [mine.id]
        assert len(store.find_by_document("doc-1")) == 2
        assert store.find_by_document("doc-2") == []

    def test_find_by_status(self, store):
        failed = store.save(make_notification(status=NotificationStatus.FAILED))
        store.save(make_notification())

        assert [n.id for n in store.find_by_status(NotificationStatus.FAILED)] == [
            failed.id
        ]

    def test_find_by_user_and_status_newest_first(self, store):
        older = store.save(make_notification(scheduled_at=BASE - timedelta(days=1)))
        newer = store.save(make_notification(scheduled_at=BASE))
        store.save(
            make_notification(scheduled_at=BASE, status=NotificationStatus.FAILED)
        )

        result = store.find_by_user_and_status("user-1", NotificationStatus.PENDING)

        assert [n.id for n in result] == [newer.id, older.id]

    def test_find_by_user_in_range_is_inclusive(self, store):
        start, end = BASE, BASE + timedelta(days=1)
        at_start = store.save(make_notification(scheduled_at=start))
        at_end = store.save(make_notification(scheduled_at=end))
        store.save(make_notification(scheduled_at=end + timedelta(seconds=1)))
        store.save(make_notification(scheduled_at=start - timedelta(seconds=1)))

        result = store.find_by_user_in_range("user-1", start, end)

        assert [n.id for n in result] == [at_start.id, at_end.id]
