"""Unit tests for NotificationService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from modules.notifications.directory import InMemoryReferenceDirectory
from modules.notifications.errors import (
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from modules.notifications.models import (
    CalendarEventDetails,
    NotificationChannel,
    NotificationStatus,
    NotificationType,
)
from modules.notifications.service import (
    ALLOWED_TRANSITIONS,
    NotificationService,
    check_sent_invariant,
    sources_for,
)
from modules.notifications.store import InMemoryNotificationStore
from tests.factories.notifications import (
    make_document,
    make_notification,
    make_user,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def store():
    return InMemoryNotificationStore()


@pytest.fixture
def service(store):
    return NotificationService(store, clock=lambda: NOW)


@pytest.mark.unit
class TestTransitionTable:
    def test_sources_for_sent(self):
        assert sources_for(NotificationStatus.SENT) == {
            NotificationStatus.PENDING,
            NotificationStatus.FAILED,
        }

    def test_sources_for_pending_is_failed_only(self):
        assert sources_for(NotificationStatus.PENDING) == {NotificationStatus.FAILED}

    def test_every_status_has_an_entry(self):
        assert set(ALLOWED_TRANSITIONS) == set(NotificationStatus)

    def test_sent_invariant(self):
        check_sent_invariant(make_notification())
        check_sent_invariant(
            make_notification(status=NotificationStatus.SENT, sent_at=NOW)
        )
        with pytest.raises(ValidationError):
            check_sent_invariant(make_notification(status=NotificationStatus.SENT))
        with pytest.raises(ValidationError):
            check_sent_invariant(
                make_notification(status=NotificationStatus.FAILED, sent_at=NOW)
            )


@pytest.mark.unit
class TestCreate:
    def test_create_forces_pending(self, service):
        created = service.create(
            make_notification(status=NotificationStatus.SENT, sent_at=NOW)
        )

        assert created.status == NotificationStatus.PENDING
        assert created.sent_at is None
        assert service.get_by_id(created.id) == created

    def test_schedule_creates_in_app_notification(self, service):
        scheduled_at = NOW + timedelta(days=1)

        created = service.schedule(
            make_document(),
            make_user(),
            NotificationType.RENEWAL_REMINDER,
            scheduled_at,
        )

        assert created.channel == NotificationChannel.IN_APP
        assert created.status == NotificationStatus.PENDING
        assert created.scheduled_at == scheduled_at

    def test_directory_rejects_unknown_user(self, store):
        directory = InMemoryReferenceDirectory()
        directory.add_document(make_document())
        service = NotificationService(store, directory=directory)

        with pytest.raises(ValidationError, match="User not found"):
            service.create(make_notification())
        assert store.find_by_user("user-1") == []

    def test_directory_rejects_unknown_document(self, store):
        directory = InMemoryReferenceDirectory()
        directory.add_user(make_user())
        service = NotificationService(store, directory=directory)

        with pytest.raises(ValidationError, match="Document not found"):
            service.create(make_notification())

    def test_directory_refreshes_references(self, store):
        directory = InMemoryReferenceDirectory()
        directory.add_user(make_user(name="Grace Hopper"))
        directory.add_document(make_document(title="Driver licence"))
        service = NotificationService(store, directory=directory)

        created = service.create(make_notification())

        assert created.user.name == "Grace Hopper"
        assert created.document.title == "Driver licence"


@pytest.mark.unit
class TestCreateWithCalendarEvent:
    def details(self, **overrides):
        values = {
            "create_calendar_event": True,
            "summary": "Passport expires",
            "start_date_time": "2025-06-01T09:00:00",
            "end_date_time": "2025-06-01T10:00:00",
            "time_zone": "America/Toronto",
        }
        values.update(overrides)
        return CalendarEventDetails(**values)

    def test_creates_event_with_user_as_attendee(self, store):
        calendar = MagicMock()
        service = NotificationService(store, calendar=calendar)

        created = service.create_with_calendar_event(make_notification(), self.details())

        assert store.get(created.id) is not None
        calendar.create_event.assert_called_once_with(
            "Passport expires",
            "",
            "Travel document",
            "2025-06-01T09:00:00",
            "2025-06-01T10:00:00",
            "America/Toronto",
            ["ada@example.com"],
        )

    def test_summary_defaults_to_document_title(self, store):
        calendar = MagicMock()
        service = NotificationService(store, calendar=calendar)

        service.create_with_calendar_event(
            make_notification(), self.details(summary=None)
        )

        assert calendar.create_event.call_args.args[0] == "Passport"

    def test_user_without_email_has_no_attendees(self, store):
        calendar = MagicMock()
        service = NotificationService(store, calendar=calendar)

        service.create_with_calendar_event(
            make_notification(user=make_user(email=None)), self.details()
        )

        assert calendar.create_event.call_args.args[6] == []

    def test_calendar_failure_keeps_notification(self, store):
        calendar = MagicMock()
        calendar.create_event.side_effect = RuntimeError("calendar down")
        service = NotificationService(store, calendar=calendar)

        created = service.create_with_calendar_event(make_notification(), self.details())

        assert store.get(created.id).status == NotificationStatus.PENDING

    def test_no_event_when_not_requested(self, store):
        calendar = MagicMock()
        service = NotificationService(store, calendar=calendar)

        service.create_with_calendar_event(
            make_notification(), self.details(create_calendar_event=False)
        )
        service.create_with_calendar_event(make_notification(), None)

        calendar.create_event.assert_not_called()

    def test_no_calendar_configured(self, service, store):
        created = service.create_with_calendar_event(make_notification(), self.details())

        assert store.get(created.id) is not None


@pytest.mark.unit
class TestStatusChanges:
    def test_mark_as_sent_sets_timestamp(self, service):
        created = service.create(make_notification())

        sent = service.mark_as_sent(created.id)

        assert sent.status == NotificationStatus.SENT
        assert sent.sent_at == NOW

    def test_mark_as_sent_from_dismissed_rejected(self, service):
        created = service.create(make_notification())
        service.mark_as_dismissed(created.id)

        with pytest.raises(InvalidTransitionError) as excinfo:
            service.mark_as_sent(created.id)
        assert excinfo.value.current == "DISMISSED"
        assert excinfo.value.target == "SENT"

    def test_mark_as_sent_twice_rejected(self, service):
        created = service.create(make_notification())
        first = service.mark_as_sent(created.id)

        with pytest.raises(InvalidTransitionError) as excinfo:
            service.mark_as_sent(created.id)
        assert excinfo.value.current == "SENT"
        assert service.get_by_id(created.id).sent_at == first.sent_at

    def test_mark_as_sent_missing_raises_without_writing(self, store):
        other = store.save(make_notification())
        spy = MagicMock(wraps=store)
        service = NotificationService(spy, clock=lambda: NOW)
        before = store.find_by_user(other.user.id)

        with pytest.raises(NotFoundError):
            service.mark_as_sent("missing")

        spy.save.assert_not_called()
        assert store.get("missing") is None
        assert store.find_by_user(other.user.id) == before

    def test_dismiss_clears_sent_at(self, service):
        created = service.create(make_notification())
        service.mark_as_sent(created.id)

        dismissed = service.mark_as_dismissed(created.id)

        assert dismissed.status == NotificationStatus.DISMISSED
        assert dismissed.sent_at is None

    def test_dismiss_is_idempotent(self, service):
        created = service.create(make_notification())
        first = service.mark_as_dismissed(created.id)

        second = service.mark_as_dismissed(created.id)

        assert second == first

    def test_dismiss_missing_raises_without_writing(self, store):
        other = store.save(make_notification())
        spy = MagicMock(wraps=store)
        service = NotificationService(spy, clock=lambda: NOW)
        before = store.find_by_user(other.user.id)

        with pytest.raises(NotFoundError):
            service.mark_as_dismissed("missing")

        spy.save.assert_not_called()
        spy.apply.assert_not_called()
        assert store.get("missing") is None
        assert store.find_by_user(other.user.id) == before

    def test_requeue_failed(self, service, store):
        notification = store.save(make_notification(status=NotificationStatus.FAILED))

        requeued = service.requeue(notification.id)

        assert requeued.status == NotificationStatus.PENDING

    def test_requeue_sent_rejected(self, service):
        created = service.create(make_notification())
        service.mark_as_sent(created.id)

        with pytest.raises(InvalidTransitionError):
            service.requeue(created.id)


@pytest.mark.unit
class TestUpdateAndDelete:
    def test_update_overwrites(self, service):
        created = service.create(make_notification())

        updated = service.update(
            created.model_copy(update={"channel": NotificationChannel.SMS})
        )

        assert service.get_by_id(created.id).channel == NotificationChannel.SMS
        assert updated.channel == NotificationChannel.SMS

    def test_update_missing_raises(self, service):
        with pytest.raises(NotFoundError):
            service.update(make_notification(notification_id="missing"))

    def test_update_rejects_sent_without_timestamp(self, service):
        created = service.create(make_notification())

        with pytest.raises(ValidationError):
            service.update(created.model_copy(update={"status": NotificationStatus.SENT}))
        assert service.get_by_id(created.id).status == NotificationStatus.PENDING

    def test_delete(self, service):
        created = service.create(make_notification())

        service.delete(created.id)

        assert service.get_by_id(created.id) is None
        with pytest.raises(NotFoundError):
            service.delete(created.id)


@pytest.mark.unit
class TestQueries:
    def test_get_by_user_and_document_and_status(self, service):
        a = service.create(make_notification(document=make_document("doc-a")))
        service.create(make_notification(user=make_user("user-2")))

        assert [n.id for n in service.get_by_document("doc-a")] == [a.id]
        assert len(service.get_by_user("user-1")) == 1
        assert len(service.get_by_status(NotificationStatus.PENDING)) == 2

    def test_get_pending_due_uses_clock(self, service):
        due = service.create(make_notification(scheduled_at=NOW - timedelta(minutes=5)))
        service.create(make_notification(scheduled_at=NOW + timedelta(minutes=5)))

        assert [n.id for n in service.get_pending_due()] == [due.id]
        assert len(service.get_due_before(NOW + timedelta(hours=1))) == 2

    def test_get_by_user_and_status_newest_first(self, service):
        older = service.create(make_notification(scheduled_at=NOW - timedelta(days=2)))
        newer = service.create(make_notification(scheduled_at=NOW - timedelta(days=1)))

        result = service.get_by_user_and_status("user-1", NotificationStatus.PENDING)

        assert [n.id for n in result] == [newer.id, older.id]

    def test_date_range_is_inclusive(self, service):
        start = NOW - timedelta(days=1)
        end = NOW + timedelta(days=1)
        on_start = service.create(make_notification(scheduled_at=start))
        on_end = service.create(make_notification(scheduled_at=end))
        service.create(make_notification(scheduled_at=end + timedelta(seconds=1)))

        result = service.get_by_user_in_date_range("user-1", start, end)

        assert {n.id for n in result} == {on_start.id, on_end.id}

    def test_inverted_date_range_rejected(self, service):
        with pytest.raises(ValidationError):
            service.get_by_user_in_date_range(
                "user-1", NOW, NOW - timedelta(seconds=1)
            )


@pytest.mark.unit
class TestProcessNotifications:
    def test_delegates_to_dispatcher(self, store):
        dispatcher = MagicMock()
        dispatcher.process_due.return_value = {"due": 0}
        service = NotificationService(store, dispatcher=dispatcher)

        assert service.process_notifications() == {"due": 0}
        dispatcher.process_due.assert_called_once_with()

    def test_without_dispatcher_raises(self, service):
        with pytest.raises(ValidationError):
            service.process_notifications()
