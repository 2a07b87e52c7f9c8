# aidoctor/donations.py
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from . import database, lifecycle, models, schemas
from .consultations import get_visible_consultation, serialize_consultation
from .deps import get_current_fundraiser

router = APIRouter(tags=["donations"])


@router.post(
    "/consultations/{consultation_id}/donations",
    response_model=schemas.DonationReceipt,
    status_code=status.HTTP_201_CREATED,
)
def add_donation(
    consultation_id: int,
    payload: schemas.DonationCreate,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_fundraiser),
):
    try:
        amount = lifecycle.parse_amount(payload.amount)
    except ValueError:
        raise HTTPException(status_code=400, detail="Please enter a valid donation amount")

    c = get_visible_consultation(db, consultation_id, current)
    donation = lifecycle.record_donation(
        db,
        c,
        current,
        amount,
        donor_name=payload.donor_name,
        donor_email=payload.donor_email,
        notes=payload.notes,
    )
    # ledger row and running total go out in one commit
    database.commit_or_raise(db, "add donation")
    db.refresh(donation)
    db.refresh(c)
    return {
        "donation": schemas.DonationOut.model_validate(donation),
        "consultation": serialize_consultation(c),
    }


@router.put("/consultations/{consultation_id}/fund-raised", response_model=schemas.ConsultationOut)
def update_fund_raised(
    consultation_id: int,
    payload: schemas.FundRaisedUpdate,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_fundraiser),
):
    try:
        amount = lifecycle.parse_amount(payload.amount, allow_zero=True)
    except ValueError:
        raise HTTPException(status_code=400, detail="Please enter an amount")

    c = get_visible_consultation(db, consultation_id, current)
    lifecycle.set_fund_raised(db, c, amount)
    database.commit_or_raise(db, "update fund raised")
    db.refresh(c)
    return serialize_consultation(c)


@router.get("/donations/", response_model=list[schemas.DonationOut])
def list_donations(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_fundraiser),
):
    return (
        db.query(models.Donation)
        .filter(models.Donation.fundraiser_id == current.id)
        .order_by(models.Donation.created_at.desc(), models.Donation.id.desc())
        .all()
    )
