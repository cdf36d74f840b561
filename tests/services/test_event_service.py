from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError

from app.models.event import Event, EventStatus, PricingTier
from app.models.participant import Participant
from app.models.payment import Payment, PaymentStatus
from app.schemas.event_schemas import EventCreate, PricingTierCreate
from app.services import event_service, payment_service


def event_create(**overrides):
    values = {
        "title": "Campus Fest",
        "upi_id": "fest@upi",
        "qr_code_url": "/storage/qr/fest.png",
        "event_date": datetime.utcnow() + timedelta(days=30),
        "pricing_tiers": [
            {"name": "Standard", "price": 100},
            {"name": "VIP", "description": "Front row", "price": 500},
        ],
    }
    values.update(overrides)
    return EventCreate(**values)


def add_payment(db_session, event, user, status=PaymentStatus.PENDING):
    payment = Payment(
        event_id=event.id,
        user_id=user.id,
        pricing_tier_id=event.pricing_tiers[0].id,
        amount=event.pricing_tiers[0].price,
        status=PaymentStatus.PENDING,
    )
    db_session.add(payment)
    payment_service.apply_payment_status(db_session, payment, status)
    db_session.commit()
    return payment


class TestCreateEvent:

    def test_create_event_with_tiers(self, db_session, organizer):
        event = event_service.create_event(db_session, event_create(max_participants=50), organizer.id)

        assert event.id is not None
        assert event.status == EventStatus.ACTIVE
        assert event.organizer_id == organizer.id
        assert event.max_participants == 50
        assert [(t.name, t.price) for t in event.pricing_tiers] == [("Standard", 100.0), ("VIP", 500.0)]
        assert db_session.query(PricingTier).count() == 2

    def test_tier_insert_failure_removes_event(self, db_session, organizer):
        with patch.object(db_session, "add_all", side_effect=SQLAlchemyError("tier insert failed")):
            with pytest.raises(HTTPException) as exc_info:
                event_service.create_event(db_session, event_create(), organizer.id)

        assert exc_info.value.status_code == 500
        assert "Failed to create pricing tiers" in exc_info.value.detail
        assert db_session.query(Event).count() == 0
        assert db_session.query(PricingTier).count() == 0

    def test_database_rejection_of_tier_leaves_no_partial_rows(self, db_session, organizer):
        # Skip request validation so the CHECK constraint is what fails
        bad_tier = PricingTierCreate.model_construct(name="Broken", description=None, price=0)
        payload = event_create().model_copy(update={"pricing_tiers": [bad_tier]})

        with pytest.raises(HTTPException) as exc_info:
            event_service.create_event(db_session, payload, organizer.id)

        assert exc_info.value.status_code == 500
        assert db_session.query(Event).count() == 0
        assert db_session.query(PricingTier).count() == 0

    def test_event_insert_failure(self, db_session, organizer):
        with patch.object(db_session, "flush", side_effect=SQLAlchemyError("db down")):
            with pytest.raises(HTTPException) as exc_info:
                event_service.create_event(db_session, event_create(), organizer.id)
        assert exc_info.value.status_code == 500
        assert "Failed to create event" in exc_info.value.detail


class TestOrganizerAccess:

    def test_get_event_for_organizer_not_found(self, db_session, organizer):
        with pytest.raises(HTTPException) as exc_info:
            event_service.get_event_for_organizer(db_session, 999, organizer.id)
        assert exc_info.value.status_code == 404

    def test_get_event_for_other_user_forbidden(self, db_session, organizer, attendee, make_event):
        event = make_event(organizer)
        with pytest.raises(HTTPException) as exc_info:
            event_service.get_event_for_organizer(db_session, event.id, attendee.id)
        assert exc_info.value.status_code == 403

    def test_update_event_status(self, db_session, organizer, make_event):
        event = make_event(organizer)
        updated = event_service.update_event_status(db_session, event.id, EventStatus.COMPLETED, organizer.id)
        assert updated.status == EventStatus.COMPLETED


class TestDeleteEvent:

    def test_delete_cascades(self, db_session, organizer, attendee, make_event):
        event = make_event(organizer, prices=(100.0, 250.0))
        add_payment(db_session, event, attendee)

        assert event_service.delete_event(db_session, event.id, organizer.id) is True
        assert db_session.query(Event).count() == 0
        assert db_session.query(PricingTier).count() == 0
        assert db_session.query(Payment).count() == 0
        assert db_session.query(Participant).count() == 0

    def test_delete_by_non_organizer(self, db_session, organizer, attendee, make_event):
        event = make_event(organizer)
        with pytest.raises(HTTPException) as exc_info:
            event_service.delete_event(db_session, event.id, attendee.id)
        assert exc_info.value.status_code == 403
        assert db_session.query(Event).count() == 1


class TestListings:

    def test_list_organizer_events_with_counts(self, db_session, organizer, make_user, make_event):
        event = make_event(organizer)
        quiet_event = make_event(organizer, title="Quiet Meetup")
        make_event(make_user(), title="Someone Else's Event")
        add_payment(db_session, event, make_user(), PaymentStatus.PENDING)
        add_payment(db_session, event, make_user(), PaymentStatus.VERIFIED)
        add_payment(db_session, event, make_user(), PaymentStatus.REJECTED)

        events = {e.id: e for e in event_service.list_organizer_events(db_session, organizer.id)}

        assert set(events) == {event.id, quiet_event.id}
        busy = events[event.id]
        assert busy.participant_count == 3
        assert busy.payment_count == 3
        assert busy.pending_count == 1
        assert busy.verified_count == 1
        assert events[quiet_event.id].payment_count == 0

    def test_list_participants_newest_first(self, db_session, organizer, make_user, make_event):
        event = make_event(organizer)
        first = add_payment(db_session, event, make_user())
        second = add_payment(db_session, event, make_user())

        participants = event_service.list_participants(db_session, event.id, organizer.id)
        assert [p.payment_id for p in participants] == [second.id, first.id]

    def test_payment_totals(self, db_session, organizer, make_user, make_event):
        event = make_event(organizer, prices=(100.0,))
        add_payment(db_session, event, make_user(), PaymentStatus.VERIFIED)
        add_payment(db_session, event, make_user(), PaymentStatus.VERIFIED)
        add_payment(db_session, event, make_user(), PaymentStatus.PENDING)

        totals = event_service.payment_totals(event_service.list_payments(db_session, event.id, organizer.id))
        assert totals.counts == {"pending": 1, "verified": 2, "rejected": 0}
        assert totals.amounts["verified"] == 200.0

    def test_dashboard_stats(self, db_session, organizer, attendee, make_user, make_event):
        event = make_event(organizer)
        add_payment(db_session, event, attendee, PaymentStatus.PENDING)
        add_payment(db_session, event, make_user(), PaymentStatus.VERIFIED)
        other_event = make_event(make_user())
        add_payment(db_session, other_event, organizer, PaymentStatus.PENDING)

        stats = event_service.get_dashboard_stats(db_session, organizer.id)
        assert stats.events_organized == 1
        assert stats.payments_made == 1
        assert stats.pending_payments == 1
        assert stats.verified_payments == 1
        assert [e.id for e in stats.recent_events] == [event.id]
