# aidoctor/stats.py
from decimal import Decimal

from fastapi import APIRouter, Depends
from sqlalchemy import func
from sqlalchemy.orm import Session

from . import database, lifecycle, models, schemas, share
from .deps import get_current_doctor, get_current_fundraiser

router = APIRouter(prefix="/stats", tags=["stats"])


def doctor_stats(db: Session, doctor: models.User) -> dict:
    total = db.query(func.count(models.Consultation.id)).scalar() or 0
    approved = (
        db.query(func.count(models.Consultation.id))
        .filter(models.Consultation.doctor_approved.is_(True))
        .scalar()
        or 0
    )
    points = (
        db.query(func.coalesce(func.sum(models.DoctorPoint.points), 0))
        .filter(models.DoctorPoint.doctor_id == doctor.id)
        .scalar()
    )
    return {
        "total_consultations": total,
        "approved_consultations": approved,
        "pending_consultations": total - approved,
        "total_points": int(points or 0),
    }


def fundraiser_stats(db: Session, fundraiser: models.User) -> dict:
    amounts = [
        Decimal(a or 0)
        for (a,) in db.query(models.Donation.amount)
        .filter(models.Donation.fundraiser_id == fundraiser.id)
        .all()
    ]
    funded = (
        db.query(models.Consultation)
        .filter(models.Consultation.fund_raised > 0)
        .all()
    )
    return {
        "total_raised": float(sum(amounts, Decimal("0"))),
        "total_donations": len(amounts),
        "active_campaigns": sum(1 for c in funded if c.doctor_approved),
        "consultations_helped": sum(1 for c in funded if lifecycle.fund_raised_of(c) > 0),
    }


@router.get("/doctor", response_model=schemas.DoctorStats)
def read_doctor_stats(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_doctor),
):
    return doctor_stats(db, current)


@router.get("/doctor/share", response_model=schemas.ShareLinks)
def read_doctor_share(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_doctor),
):
    s = doctor_stats(db, current)
    text = share.doctor_summary(s["approved_consultations"], s["total_points"])
    return {"text": text, "links": share.share_links(text)}


@router.get("/fundraiser", response_model=schemas.FundraiserStats)
def read_fundraiser_stats(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_fundraiser),
):
    return fundraiser_stats(db, current)


@router.get("/fundraiser/share", response_model=schemas.ShareLinks)
def read_fundraiser_share(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_fundraiser),
):
    s = fundraiser_stats(db, current)
    text = share.fundraiser_summary(s["total_raised"], s["consultations_helped"])
    return {"text": text, "links": share.share_links(text)}
