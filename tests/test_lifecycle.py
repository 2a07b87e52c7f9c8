from datetime import datetime
from decimal import Decimal

import pytest

from sqlalchemy import create_engine, func
from sqlalchemy.orm import sessionmaker

from aidoctor import database, lifecycle, models


def make_consultation(**kwargs):
    fields = dict(
        patient_id=1,
        symptoms="cough",
        analysis="Rest.",
        doctor_approved=False,
        fund_raised=Decimal("0"),
    )
    fields.update(kwargs)
    return models.Consultation(**fields)


@pytest.mark.parametrize("raw,expected", [
    ("25.50", Decimal("25.50")),
    (" 7 ", Decimal("7.00")),
    ("0.005", Decimal("0.01")),
])
def test_parse_amount(raw, expected):
    assert lifecycle.parse_amount(raw) == expected


@pytest.mark.parametrize("raw", [
    "", "abc", "-5", "0", "NaN", "Infinity", None, "25,50", "1e30", "1e10", "10000000000.00",
])
def test_parse_amount_rejects(raw):
    with pytest.raises(ValueError):
        lifecycle.parse_amount(raw)


def test_parse_amount_zero_allowed_for_totals():
    assert lifecycle.parse_amount("0", allow_zero=True) == Decimal("0.00")
    with pytest.raises(ValueError):
        lifecycle.parse_amount("-1", allow_zero=True)


def test_status_of():
    assert lifecycle.status_of(make_consultation()) == lifecycle.CREATED
    assert lifecycle.status_of(make_consultation(fund_raised=Decimal("5"))) == lifecycle.PENDING_REVIEW
    assert lifecycle.status_of(make_consultation(doctor_approved=True, approved_by=2)) == lifecycle.APPROVED
    reviewed = make_consultation(reviewed_at=datetime(2025, 1, 1))
    assert lifecycle.status_of(reviewed) == lifecycle.REJECTED


def test_needs_funding():
    assert lifecycle.needs_funding(make_consultation(doctor_approved=True))
    assert not lifecycle.needs_funding(make_consultation(doctor_approved=True, fund_raised=Decimal("1")))
    assert not lifecycle.needs_funding(make_consultation())


def test_review_and_unapprove_in_session(db_session):
    doctor = models.User(email="doc@clinic.org", role="doctor", password_hash=b"x")
    patient = models.User(email="pat@clinic.org", role="patient", password_hash=b"x")
    db_session.add_all([doctor, patient])
    db_session.flush()
    c = make_consultation(patient_id=patient.id, fund_raised=Decimal("12.00"))
    db_session.add(c)
    db_session.flush()

    point = lifecycle.review(db_session, c, doctor, approved=True, doctor_notes="Looks right")
    db_session.commit()
    assert point.points == 10
    assert c.approved_by == doctor.id
    assert c.doctor_notes == "Looks right"

    assert lifecycle.review(db_session, c, doctor, approved=False, doctor_notes="  ") is None
    db_session.commit()
    assert c.approved_by is None
    assert c.doctor_notes == "Looks right"
    assert c.fund_raised == Decimal("12.00")
    assert db_session.query(models.DoctorPoint).count() == 1


def test_record_donation_and_set_total(db_session):
    fundraiser = models.User(email="fund@clinic.org", role="fundraiser", password_hash=b"x")
    patient = models.User(email="pat2@clinic.org", role="patient", password_hash=b"x")
    db_session.add_all([fundraiser, patient])
    db_session.flush()
    c = make_consultation(patient_id=patient.id, fund_raised=Decimal("10"))
    db_session.add(c)
    db_session.flush()

    donation = lifecycle.record_donation(db_session, c, fundraiser, Decimal("25.50"), donor_name=" ")
    db_session.commit()
    assert donation.donor_name is None
    assert c.fund_raised == Decimal("35.50")

    lifecycle.set_fund_raised(db_session, c, Decimal("0"))
    db_session.commit()
    assert c.fund_raised == Decimal("0")
    assert db_session.query(models.Donation).count() == 1


def test_largest_storable_amount():
    assert lifecycle.parse_amount("9999999999.99") == Decimal("9999999999.99")


def test_concurrent_donations_both_reach_the_total(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'donations.db'}")
    database.init_db(bind=engine)
    Session = sessionmaker(bind=engine, autocommit=False, autoflush=False)

    with Session() as setup:
        fundraiser = models.User(email="fund@clinic.org", role="fundraiser", password_hash=b"x")
        patient = models.User(email="pat@clinic.org", role="patient", password_hash=b"x")
        setup.add_all([fundraiser, patient])
        setup.flush()
        c = make_consultation(patient_id=patient.id)
        setup.add(c)
        setup.commit()
        cid, fid = c.id, fundraiser.id

    first, second = Session(), Session()
    try:
        # both sessions load the row before either writes
        c1, c2 = first.get(models.Consultation, cid), second.get(models.Consultation, cid)
        f1, f2 = first.get(models.User, fid), second.get(models.User, fid)
        lifecycle.record_donation(first, c1, f1, Decimal("10"))
        lifecycle.record_donation(second, c2, f2, Decimal("5"))
        first.commit()
        second.commit()
    finally:
        first.close()
        second.close()

    with Session() as check:
        total = check.get(models.Consultation, cid).fund_raised
        ledger = check.query(func.sum(models.Donation.amount)).scalar()
    assert total == Decimal("15.00")
    assert Decimal(str(ledger)) == Decimal("15.00")
    engine.dispose()
