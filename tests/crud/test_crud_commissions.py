import pytest
from sqlalchemy.orm import Session
from decimal import Decimal

from app.crud import crud_commission
from app.core.exceptions import PartialFailure
from app.schemas.commission import CommissionCreate

pytestmark = pytest.mark.crud


def _entry(user, transaction_id: int = 1, amount: str = "10.00", **overrides) -> CommissionCreate:
    data = dict(
        transaction_id=transaction_id,
        user_id=user.id,
        user_type=user.user_type,
        service_type="recharge",
        service_id=transaction_id,
        provider="Airtel",
        original_amount=Decimal("1000.00"),
        commission_percentage=Decimal("1.0"),
        commission_amount=Decimal(amount),
    )
    data.update(overrides)
    return CommissionCreate(**data)


def test_record_commissions(db_session: Session, hierarchy: dict):
    entries = [_entry(hierarchy["admin"], amount="5.00"), _entry(hierarchy["service_agent"], amount="30.00")]
    recorded = crud_commission.record_commissions(db_session, commissions=entries)

    assert len(recorded) == 2
    assert all(c.id is not None for c in recorded)
    assert all(c.status == "pending" for c in recorded)
    assert recorded[1].commission_amount == Decimal("30.00")
    assert recorded[1].recipient.id == hierarchy["service_agent"].id

def test_record_nothing(db_session: Session):
    assert crud_commission.record_commissions(db_session, commissions=[]) == []

def test_record_is_atomic_on_invalid_entry(db_session: Session, hierarchy: dict):
    entries = [
        _entry(hierarchy["admin"], amount="5.00"),
        _entry(hierarchy["branch_manager"], amount="5.00"),
        _entry(hierarchy["taluk_manager"], amount="-1.00"), # Violates the positive amount check
        _entry(hierarchy["service_agent"], amount="30.00"),
    ]
    with pytest.raises(PartialFailure) as exc_info:
        crud_commission.record_commissions(db_session, commissions=entries)

    assert exc_info.value.retryable is True
    assert exc_info.value.transaction_id == 1
    assert crud_commission.get_commissions_by_transaction(db_session, transaction_id=1) == []

def test_record_rejects_second_entry_for_same_tier(db_session: Session, hierarchy: dict):
    crud_commission.record_commissions(db_session, commissions=[_entry(hierarchy["service_agent"])])

    with pytest.raises(PartialFailure):
        crud_commission.record_commissions(db_session, commissions=[_entry(hierarchy["service_agent"], amount="99.00")])

    recorded = crud_commission.get_commissions_by_transaction(db_session, transaction_id=1)
    assert len(recorded) == 1
    assert recorded[0].commission_amount == Decimal("10.00")

def test_same_transaction_id_in_other_service_type(db_session: Session, hierarchy: dict):
    crud_commission.record_commissions(db_session, commissions=[_entry(hierarchy["service_agent"])])
    crud_commission.record_commissions(
        db_session, commissions=[_entry(hierarchy["service_agent"], service_type="booking")]
    )

    assert len(crud_commission.get_commissions_by_transaction(db_session, transaction_id=1)) == 2
    booking = crud_commission.get_commissions_by_transaction(db_session, transaction_id=1, service_type="booking")
    assert [c.service_type for c in booking] == ["booking"]

def test_record_unknown_recipient_fails(db_session: Session):
    class Ghost:
        id = 9999
        user_type = "service_agent"

    with pytest.raises(PartialFailure):
        crud_commission.record_commissions(db_session, commissions=[_entry(Ghost())])


def test_mark_paid(db_session: Session, hierarchy: dict):
    recorded = crud_commission.record_commissions(db_session, commissions=[
        _entry(hierarchy["admin"]), _entry(hierarchy["service_agent"])
    ])
    ids = [c.id for c in recorded]

    assert crud_commission.mark_commissions_paid(db_session, commission_ids=ids) == 2
    for commission_id in ids:
        commission = crud_commission.get_commission(db_session, commission_id)
        db_session.refresh(commission)
        assert commission.status == "paid"
        assert commission.paid_at is not None

def test_mark_paid_twice_updates_nothing(db_session: Session, hierarchy: dict):
    recorded = crud_commission.record_commissions(db_session, commissions=[_entry(hierarchy["admin"])])
    ids = [recorded[0].id]

    assert crud_commission.mark_commissions_paid(db_session, commission_ids=ids) == 1
    assert crud_commission.mark_commissions_paid(db_session, commission_ids=ids) == 0

def test_mark_paid_ignores_unknown_ids(db_session: Session, hierarchy: dict):
    recorded = crud_commission.record_commissions(db_session, commissions=[_entry(hierarchy["admin"])])
    assert crud_commission.mark_commissions_paid(db_session, commission_ids=[recorded[0].id, 9998, 9999]) == 1
    assert crud_commission.mark_commissions_paid(db_session, commission_ids=[]) == 0


def test_list_pending_filters(db_session: Session, hierarchy: dict):
    agent = hierarchy["service_agent"]
    admin = hierarchy["admin"]
    first = crud_commission.record_commissions(db_session, commissions=[_entry(agent, transaction_id=1)])[0]
    crud_commission.record_commissions(db_session, commissions=[_entry(agent, transaction_id=2, service_type="booking")])
    crud_commission.record_commissions(db_session, commissions=[_entry(admin, transaction_id=3)])
    paid = crud_commission.record_commissions(db_session, commissions=[_entry(agent, transaction_id=4)])[0]
    crud_commission.mark_commissions_paid(db_session, commission_ids=[paid.id])

    pending = crud_commission.list_pending_commissions(db_session)
    assert [c.transaction_id for c in pending] == [1, 2, 3]

    for_agent = crud_commission.list_pending_commissions(db_session, user_id=agent.id)
    assert [c.transaction_id for c in for_agent] == [1, 2]
    assert for_agent[0].id == first.id

    recharge_only = crud_commission.list_pending_commissions(db_session, service_type="recharge")
    assert [c.transaction_id for c in recharge_only] == [1, 3]

    assert len(crud_commission.list_pending_commissions(db_session, skip=1, limit=1)) == 1

def test_get_commissions_by_user(db_session: Session, hierarchy: dict):
    agent = hierarchy["service_agent"]
    for transaction_id in (1, 2, 3):
        crud_commission.record_commissions(db_session, commissions=[_entry(agent, transaction_id=transaction_id)])
    crud_commission.record_commissions(db_session, commissions=[_entry(hierarchy["admin"], transaction_id=4)])
    oldest = crud_commission.get_commissions_by_transaction(db_session, transaction_id=1)[0]
    crud_commission.mark_commissions_paid(db_session, commission_ids=[oldest.id])

    entries = crud_commission.get_commissions_by_user(db_session, user_id=agent.id)
    assert [c.transaction_id for c in entries] == [3, 2, 1]

    paid = crud_commission.get_commissions_by_user(db_session, user_id=agent.id, status="paid")
    assert [c.transaction_id for c in paid] == [1]

def test_get_commission_not_found(db_session: Session):
    assert crud_commission.get_commission(db_session, 9999) is None
