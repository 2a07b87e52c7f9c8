# aidoctor/lifecycle.py
"""Consultation state and the writes that move it.

Nothing here commits. Callers own the session and commit once, so the
donation row and the running total land in the same transaction.
"""
import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from sqlalchemy.orm import Session

from . import config, models

logger = logging.getLogger(__name__)

CREATED = "created"
PENDING_REVIEW = "pending-review"
APPROVED = "approved"
REJECTED = "rejected"

CENTS = Decimal("0.01")
# Numeric(12, 2) holds at most ten integer digits
MAX_AMOUNT = Decimal("1e10")


def parse_amount(raw, allow_zero: bool = False) -> Decimal:
    """Parse a money string such as ``"25.50"``; raises ValueError when unusable."""
    text = str(raw if raw is not None else "").strip()
    try:
        value = Decimal(text)
        if not value.is_finite():
            raise ValueError(f"not a finite number: {text!r}")
        value = value.quantize(CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise ValueError(f"not a number: {text!r}")
    if value >= MAX_AMOUNT:
        raise ValueError(f"amount too large: {text!r}")
    if value < 0 or (value == 0 and not allow_zero):
        raise ValueError(f"amount out of range: {text!r}")
    return value


def fund_raised_of(consultation: models.Consultation) -> Decimal:
    return Decimal(consultation.fund_raised or 0)


def status_of(consultation: models.Consultation) -> str:
    if consultation.doctor_approved:
        return APPROVED
    if consultation.reviewed_at is not None:
        return REJECTED
    if fund_raised_of(consultation) > 0 or consultation.doctor_notes or consultation.prescription:
        return PENDING_REVIEW
    return CREATED


def needs_funding(consultation: models.Consultation) -> bool:
    return bool(consultation.doctor_approved) and fund_raised_of(consultation) == 0


def review(
    db: Session,
    consultation: models.Consultation,
    doctor: models.User,
    approved: bool,
    doctor_notes: Optional[str] = None,
    prescription: Optional[str] = None,
) -> Optional[models.DoctorPoint]:
    """Approve or un-approve. Approval credits the doctor with points."""
    consultation.doctor_approved = approved
    consultation.approved_by = doctor.id if approved else None
    consultation.reviewed_at = datetime.utcnow()
    # blank input leaves the previous annotation in place
    if doctor_notes and doctor_notes.strip():
        consultation.doctor_notes = doctor_notes.strip()
    if prescription and prescription.strip():
        consultation.prescription = prescription.strip()
    db.add(consultation)

    if not approved:
        logger.info("Doctor %s un-approved consultation %s", doctor.id, consultation.id)
        return None

    point = models.DoctorPoint(
        doctor_id=doctor.id,
        consultation_id=consultation.id,
        points=config.DOCTOR_APPROVAL_POINTS,
        reason="Approved consultation",
    )
    db.add(point)
    logger.info("Doctor %s approved consultation %s", doctor.id, consultation.id)
    return point


def record_donation(
    db: Session,
    consultation: models.Consultation,
    fundraiser: models.User,
    amount: Decimal,
    donor_name: Optional[str] = None,
    donor_email: Optional[str] = None,
    notes: Optional[str] = None,
) -> models.Donation:
    donation = models.Donation(
        consultation_id=consultation.id,
        fundraiser_id=fundraiser.id,
        amount=amount,
        donor_name=(donor_name or "").strip() or None,
        donor_email=(donor_email or "").strip() or None,
        notes=(notes or "").strip() or None,
    )
    db.add(donation)
    # incremented in SQL so concurrent donations both land
    consultation.fund_raised = models.Consultation.fund_raised + amount
    db.add(consultation)
    logger.info(
        "Fundraiser %s recorded %s on consultation %s", fundraiser.id, amount, consultation.id
    )
    return donation


def set_fund_raised(db: Session, consultation: models.Consultation, amount: Decimal) -> None:
    """Overwrite the running total; the donation ledger is left untouched."""
    logger.info(
        "Fund raised on consultation %s set from %s to %s",
        consultation.id, fund_raised_of(consultation), amount,
    )
    consultation.fund_raised = amount
    db.add(consultation)
