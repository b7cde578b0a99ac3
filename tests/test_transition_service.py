"""Tests for the application transition engine."""

from datetime import datetime, timedelta
from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from sqlalchemy.exc import SQLAlchemyError

from placement_backend.core.error_handling import (
    DatabaseError,
    InvalidTransition,
    NotFoundError,
    ValidationError,
)
from placement_backend.core.event_publisher import TransitionEventPublisher
from placement_backend.models import Application, StatusTransitionLog
from placement_backend.models.application_status import ActorType, ApplicationStatus
from placement_backend.services.transition_service import ApplicationTransitionService


@pytest.fixture
def publisher():
    return TransitionEventPublisher()


@pytest.fixture
def service(db_session, publisher):
    return ApplicationTransitionService(db_session, publisher=publisher)


class TestSingleTransition:
    """Test apply_single_transition."""
    
    def test_shortlist_applied_application(self, service, job, student, make_application, recruiter_user_id):
        application = make_application(job, student)
        
        result = service.apply_single_transition(
            application.id, "shortlisted", actor_id=recruiter_user_id
        )
        
        assert result.status == "shortlisted"
        assert result.shortlisted_at is not None
        assert result.shortlisted_by == recruiter_user_id
        assert result.selected_at is None
        assert result.rejected_at is None
    
    def test_selected_application_cannot_go_back(self, service, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.SELECTED)
        
        with pytest.raises(InvalidTransition) as exc_info:
            service.apply_single_transition(application.id, "applied")
        
        assert exc_info.value.from_status == "selected"
        assert exc_info.value.to_status == "applied"
        assert service.repository.get_active(service.db, application.id).status == "selected"
    
    def test_reject_requires_reason(self, service, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.SHORTLISTED)
        
        with pytest.raises(ValidationError):
            service.apply_single_transition(application.id, "rejected")
        with pytest.raises(ValidationError):
            service.apply_single_transition(application.id, "rejected", reason="   ")
        
        assert service.repository.get_active(service.db, application.id).status == "shortlisted"
    
    def test_rejection_without_reason_leaves_record_untouched(self, service, db_session, job, student, make_application):
        application = make_application(
            job,
            student,
            status=ApplicationStatus.SHORTLISTED,
            shortlisted_at=datetime.utcnow() - timedelta(days=1),
            recruiter_notes="Strong interview",
            ats_score={"score": 81, "recommendation": "Recommended", "strengths": [], "weaknesses": []},
        )
        columns = Application.__table__.columns.keys()
        before = {column: getattr(application, column) for column in columns}
        
        for reason in (None, "", "   "):
            with pytest.raises(ValidationError):
                service.apply_single_transition(
                    application.id, "rejected", reason=reason, notes="Should not be stored"
                )
        
        db_session.expire_all()
        stored = db_session.get(Application, application.id)
        assert {column: getattr(stored, column) for column in columns} == before
        assert db_session.query(StatusTransitionLog).count() == 0
    
    def test_reject_stores_reason(self, service, job, student, make_application):
        application = make_application(job, student)
        
        result = service.apply_single_transition(
            application.id, ApplicationStatus.REJECTED, reason="CGPA below cutoff"
        )
        
        assert result.status == "rejected"
        assert result.rejection_reason == "CGPA below cutoff"
        assert result.rejected_at is not None
    
    def test_same_status_is_invalid(self, service, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.ON_HOLD)
        
        with pytest.raises(InvalidTransition):
            service.apply_single_transition(application.id, "on-hold")
    
    def test_on_hold_to_selected_is_invalid(self, service, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.ON_HOLD)
        
        with pytest.raises(InvalidTransition):
            service.apply_single_transition(application.id, "selected")
    
    def test_unknown_status_is_validation_error(self, service, job, student, make_application):
        application = make_application(job, student)
        
        with pytest.raises(ValidationError):
            service.apply_single_transition(application.id, "hired")
    
    def test_unknown_application(self, service):
        application_id = uuid4()
        
        with pytest.raises(NotFoundError, match=f"Application with ID {application_id} not found"):
            service.apply_single_transition(application_id, "shortlisted")
    
    def test_withdrawn_application_is_not_found(self, service, job, student, make_application):
        application = make_application(job, student, deleted_at=datetime.utcnow())
        
        with pytest.raises(NotFoundError):
            service.apply_single_transition(application.id, "shortlisted")
    
    def test_first_reached_timestamp_is_not_overwritten(self, service, job, student, make_application):
        earlier = datetime.utcnow() - timedelta(days=3)
        application = make_application(
            job, student, status=ApplicationStatus.ON_HOLD, shortlisted_at=earlier
        )
        
        result = service.apply_single_transition(application.id, "shortlisted")
        
        assert result.status == "shortlisted"
        assert result.shortlisted_at == earlier
    
    def test_notes_are_stored(self, service, job, student, make_application):
        application = make_application(job, student)
        
        result = service.apply_single_transition(
            application.id, "on-hold", notes="Waiting for second round slots"
        )
        
        assert result.recruiter_notes == "Waiting for second round slots"
    
    def test_full_path_to_selected(self, service, job, student, make_application):
        application = make_application(job, student)
        
        service.apply_single_transition(application.id, "on-hold")
        service.apply_single_transition(application.id, "shortlisted")
        result = service.apply_single_transition(application.id, "selected")
        
        assert result.status == "selected"
        assert result.shortlisted_at is not None
        assert result.selected_at is not None
        
        history = service.get_transition_history(application.id)
        assert [(log.from_status, log.to_status) for log in history] == [
            ("shortlisted", "selected"),
            ("on-hold", "shortlisted"),
            ("applied", "on-hold"),
        ]
    
    def test_history_records_actor(self, service, job, student, make_application):
        application = make_application(job, student)
        
        service.apply_single_transition(
            application.id, "shortlisted", actor_type=ActorType.SYSTEM, notes="Auto-shortlisted: ATS Score 90%"
        )
        
        log = service.get_transition_history(application.id)[0]
        assert log.actor_type == "SYSTEM"
        assert log.actor_id is None
        assert log.reason == "Auto-shortlisted: ATS Score 90%"


class TestTransitionEvents:
    """Test that events follow the commit."""
    
    def test_event_published_after_commit(self, service, publisher, db_session, job, student, make_application):
        application = make_application(job, student)
        calls = []
        real_commit = db_session.commit
        
        def recording_commit():
            calls.append("commit")
            real_commit()
        
        publisher.subscribe(lambda event: calls.append((event.from_status, event.to_status)))
        
        with patch.object(db_session, "commit", side_effect=recording_commit):
            service.apply_single_transition(application.id, "shortlisted")
        
        assert calls == ["commit", ("applied", "shortlisted")]
    
    def test_no_event_when_commit_fails(self, service, publisher, db_session, job, student, make_application):
        application = make_application(job, student)
        handler = MagicMock()
        publisher.subscribe(handler)
        
        with patch.object(db_session, "commit", side_effect=SQLAlchemyError("disk full")):
            with pytest.raises(DatabaseError):
                service.apply_single_transition(application.id, "shortlisted")
        
        handler.assert_not_called()
        assert service.repository.get_active(db_session, application.id).status == "applied"
    
    def test_no_event_for_rejected_request(self, service, publisher, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.REJECTED)
        handler = MagicMock()
        publisher.subscribe(handler)
        
        with pytest.raises(InvalidTransition):
            service.apply_single_transition(application.id, "shortlisted")
        
        handler.assert_not_called()
    
    def test_failing_handler_does_not_undo_transition(self, service, publisher, job, student, make_application):
        application = make_application(job, student)
        publisher.subscribe(MagicMock(side_effect=RuntimeError("mail server down")))
        
        result = service.apply_single_transition(application.id, "shortlisted")
        
        assert result.status == "shortlisted"


class TestBulkTransition:
    """Test apply_bulk_transition."""
    
    def test_partial_failure(self, service, job, make_student, make_application):
        ok_one = make_application(job, make_student())
        ok_two = make_application(job, make_student(), status=ApplicationStatus.ON_HOLD)
        terminal = make_application(job, make_student(), status=ApplicationStatus.SELECTED)
        
        result = service.apply_bulk_transition(
            [ok_one.id, terminal.id, ok_two.id], "shortlisted"
        )
        
        assert result.requested == 3
        assert result.succeeded == [ok_one.id, ok_two.id]
        assert list(result.failed) == [terminal.id]
        assert result.failed[terminal.id].error == "invalid_transition"
        assert service.repository.get_active(service.db, terminal.id).status == "selected"
        assert service.repository.get_active(service.db, ok_one.id).status == "shortlisted"
    
    def test_unknown_ids_fail_individually(self, service, job, student, make_application):
        application = make_application(job, student)
        missing = uuid4()
        
        result = service.apply_bulk_transition([missing, application.id], "on-hold")
        
        assert result.succeeded == [application.id]
        assert result.failed[missing].error == "not_found"
    
    def test_duplicates_processed_once(self, service, job, student, make_application):
        application = make_application(job, student)
        
        result = service.apply_bulk_transition([application.id, application.id], "shortlisted")
        
        assert result.requested == 1
        assert result.success_count == 1
        assert result.failure_count == 0
    
    def test_empty_selection(self, service):
        with pytest.raises(ValidationError):
            service.apply_bulk_transition([], "shortlisted")
    
    def test_bulk_reject_without_reason_touches_nothing(self, service, job, student, make_application):
        application = make_application(job, student)
        
        with pytest.raises(ValidationError):
            service.apply_bulk_transition([application.id], "rejected")
        
        assert service.repository.get_active(service.db, application.id).status == "applied"
    
    def test_bulk_reject_with_reason(self, service, job, make_student, make_application):
        first = make_application(job, make_student())
        second = make_application(job, make_student(), status=ApplicationStatus.SHORTLISTED)
        
        result = service.apply_bulk_transition(
            [first.id, second.id], "rejected", reason="Position filled"
        )
        
        assert result.success_count == 2
        for application_id in (first.id, second.id):
            stored = service.repository.get_active(service.db, application_id)
            assert stored.rejection_reason == "Position filled"
    
    def test_one_event_per_success(self, service, publisher, job, make_student, make_application):
        ok = make_application(job, make_student())
        terminal = make_application(job, make_student(), status=ApplicationStatus.REJECTED)
        handler = MagicMock()
        publisher.subscribe(handler)
        
        service.apply_bulk_transition([ok.id, terminal.id], "shortlisted")
        
        assert handler.call_count == 1
        assert handler.call_args[0][0].application_id == ok.id


class TestCanTransition:
    """Test can_transition."""
    
    def test_allowed(self, service, job, student, make_application):
        application = make_application(job, student)
        assert service.can_transition(application.id, "on-hold") == (True, "Transition is allowed")
    
    def test_terminal(self, service, job, student, make_application):
        application = make_application(job, student, status=ApplicationStatus.SELECTED)
        allowed, reason = service.can_transition(application.id, "rejected")
        assert not allowed
        assert "terminal" in reason
    
    def test_unknown_status(self, service, job, student, make_application):
        application = make_application(job, student)
        allowed, reason = service.can_transition(application.id, "hired")
        assert not allowed
        assert "Invalid status" in reason
