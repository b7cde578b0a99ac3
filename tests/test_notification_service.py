"""Tests for the notification dispatcher and inbox."""

from datetime import datetime
from uuid import uuid4

import pytest

from placement_backend.core.error_handling import NotFoundError
from placement_backend.core.event_publisher import TransitionEvent
from placement_backend.models import Notification
from placement_backend.models.application_status import ApplicationStatus
from placement_backend.services.notification_service import NotificationService


@pytest.fixture
def service(db_session):
    return NotificationService(db_session)


def event_for(application, from_status, to_status):
    return TransitionEvent(
        application_id=application.id,
        from_status=from_status,
        to_status=to_status,
        occurred_at=datetime.utcnow()
    )


class TestTransitionNotifications:
    """Test handle_transition_event."""
    
    def test_shortlisted(self, service, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.SHORTLISTED)
        
        notification = service.handle_transition_event(event_for(application, "applied", "shortlisted"))
        
        assert notification.user_id == student.user_id
        assert notification.user_role == "student"
        assert notification.type == "application_shortlisted"
        assert notification.priority == "high"
        assert job.title in notification.message
        assert notification.action_url == "/student/applications"
        assert notification.related_job_id == job.id
        assert notification.related_application_id == application.id
    
    def test_selected_links_to_job(self, service, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.SELECTED)
        
        notification = service.handle_transition_event(event_for(application, "shortlisted", "selected"))
        
        assert notification.type == "application_selected"
        assert notification.action_url == f"/student/jobs/{job.id}"
    
    def test_rejected(self, service, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.REJECTED)
        
        notification = service.handle_transition_event(event_for(application, "applied", "rejected"))
        
        assert notification.type == "application_rejected"
        assert notification.priority == "medium"
    
    def test_on_hold_is_not_announced(self, service, db_session, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.ON_HOLD)
        
        assert service.handle_transition_event(event_for(application, "applied", "on-hold")) is None
        assert db_session.query(Notification).count() == 0
    
    def test_missing_application(self, service, db_session):
        event = TransitionEvent(
            application_id=uuid4(),
            from_status="applied",
            to_status="shortlisted",
            occurred_at=datetime.utcnow()
        )
        
        assert service.handle_transition_event(event) is None
        assert db_session.query(Notification).count() == 0


class TestInbox:
    """Test listing and read tracking."""
    
    def _notify(self, service, user_id, title="Hello"):
        return service.create_notification(
            user_id=user_id,
            user_role="student",
            type="application_shortlisted",
            title=title,
            message="Message"
        )
    
    def test_list_with_counts(self, service):
        user_id = uuid4()
        for i in range(3):
            self._notify(service, user_id, title=f"N{i}")
        self._notify(service, uuid4())
        
        page = service.list_for_user(user_id, limit=2)
        
        assert len(page["notifications"]) == 2
        assert page["total"] == 3
        assert page["unread_count"] == 3
        assert page["limit"] == 2
    
    def test_mark_as_read(self, service):
        user_id = uuid4()
        notification = self._notify(service, user_id)
        
        updated = service.mark_as_read(notification.id, user_id)
        
        assert updated.is_read
        assert updated.read_at is not None
        assert service.unread_count(user_id) == 0
    
    def test_cannot_read_someone_elses(self, service):
        notification = self._notify(service, uuid4())
        
        with pytest.raises(NotFoundError):
            service.mark_as_read(notification.id, uuid4())
    
    def test_mark_all_as_read(self, service):
        user_id = uuid4()
        other = uuid4()
        for _ in range(2):
            self._notify(service, user_id)
        self._notify(service, other)
        
        assert service.mark_all_as_read(user_id) == 2
        assert service.unread_count(user_id) == 0
        assert service.unread_count(other) == 1
        assert service.list_for_user(user_id, is_read=True)["total"] == 2
    
    def test_delete_notification(self, service):
        user_id = uuid4()
        notification = self._notify(service, user_id)
        
        service.delete_notification(notification.id, user_id)
        
        assert service.list_for_user(user_id)["total"] == 0
    
    def test_cannot_delete_someone_elses(self, service):
        owner = uuid4()
        notification = self._notify(service, owner)
        
        with pytest.raises(NotFoundError):
            service.delete_notification(notification.id, uuid4())
        assert service.list_for_user(owner)["total"] == 1
    
    def test_clear_read_keeps_unread_and_other_users(self, service):
        user_id = uuid4()
        other = uuid4()
        read = self._notify(service, user_id, title="Read")
        unread = self._notify(service, user_id, title="Unread")
        service.mark_as_read(read.id, user_id)
        other_read = self._notify(service, other)
        service.mark_as_read(other_read.id, other)
        
        assert service.clear_read(user_id) == 1
        
        remaining = service.list_for_user(user_id)["notifications"]
        assert [n.id for n in remaining] == [unread.id]
        assert service.list_for_user(other)["total"] == 1
