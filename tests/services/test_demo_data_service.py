import random

import pytest
from fastapi import HTTPException

from app.models.event import Event
from app.models.participant import Participant
from app.models.payment import Payment, PaymentStatus
from app.models.user import User
from app.services import demo_data_service, payment_service, upi


class TestCreateDemoParticipants:

    def test_creates_consistent_rows(self, db_session, organizer, make_event):
        event = make_event(organizer, prices=(100.0, 250.0))

        created = demo_data_service.create_demo_participants(
            db_session, event.id, 5, organizer, rng=random.Random(7)
        )

        assert len(created) == 5
        assert [c.name for c in created] == demo_data_service.DEMO_NAMES[:5]
        assert db_session.query(User).filter(User.is_test_user.is_(True)).count() == 5

        payments = db_session.query(Payment).filter(Payment.event_id == event.id).all()
        assert len(payments) == 5
        for payment in payments:
            assert payment.status in (PaymentStatus.VERIFIED, PaymentStatus.PENDING)
            assert upi.validate_transaction_id(payment.transaction_id)
            assert payment.amount in (100.0, 250.0)
            assert payment.participant.status == payment_service.participant_status_for(payment.status)

    def test_count_is_capped(self, db_session, organizer, make_event):
        event = make_event(organizer)
        created = demo_data_service.create_demo_participants(db_session, event.id, 25, organizer, rng=random.Random(1))
        assert len(created) == demo_data_service.MAX_DEMO_PARTICIPANTS
        assert db_session.query(Participant).count() == demo_data_service.MAX_DEMO_PARTICIPANTS

    def test_repeat_runs_do_not_collide(self, db_session, organizer, make_event):
        event = make_event(organizer)
        demo_data_service.create_demo_participants(db_session, event.id, 3, organizer)
        demo_data_service.create_demo_participants(db_session, event.id, 3, organizer)
        assert db_session.query(Participant).count() == 6

    def test_only_organizer_may_generate(self, db_session, organizer, attendee, make_event):
        event = make_event(organizer)
        with pytest.raises(HTTPException) as exc_info:
            demo_data_service.create_demo_participants(db_session, event.id, 3, attendee)
        assert exc_info.value.status_code == 403

    def test_event_without_tiers(self, db_session, organizer, make_event):
        event = make_event(organizer, prices=())
        with pytest.raises(HTTPException) as exc_info:
            demo_data_service.create_demo_participants(db_session, event.id, 3, organizer)
        assert exc_info.value.status_code == 400

    def test_unknown_event(self, db_session, organizer):
        with pytest.raises(HTTPException) as exc_info:
            demo_data_service.create_demo_participants(db_session, 404, 3, organizer)
        assert exc_info.value.status_code == 404
