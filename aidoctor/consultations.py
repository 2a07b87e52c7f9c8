# aidoctor/consultations.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from . import database, lifecycle, models, schemas
from .deps import get_current_doctor, get_current_patient, get_current_user, require_role
from .gemini import AnalysisError, SymptomAnalyzer, analysis_http_error, get_analyzer
from .medicines import parse_medicines, total_cost

router = APIRouter(prefix="/consultations", tags=["consultations"])

COMMON_SYMPTOMS = [
    "Fever",
    "Headache",
    "Cough",
    "Sore Throat",
    "Nausea",
    "Dizziness",
    "Fatigue",
    "Body Aches",
    "Chest Pain",
    "Shortness of Breath",
    "Abdominal Pain",
    "Joint Pain",
    "Rash",
    "Diarrhea",
    "Constipation",
]


def serialize_consultation(c: models.Consultation) -> dict:
    """Row plus the fields derived on every read (status, medicines, cost total)."""
    medicines = parse_medicines(c.analysis or "")
    return {
        "id": c.id,
        "patient_id": c.patient_id,
        "symptoms": c.symptoms,
        "analysis": c.analysis,
        "doctor_approved": bool(c.doctor_approved),
        "fund_raised": float(lifecycle.fund_raised_of(c)),
        "doctor_notes": c.doctor_notes,
        "prescription": c.prescription,
        "approved_by": c.approved_by,
        "reviewed_at": c.reviewed_at,
        "created_at": c.created_at,
        "status": lifecycle.status_of(c),
        "medicines": medicines,
        "medicine_total": float(total_cost(medicines)),
    }


def get_visible_consultation(
    db: Session, consultation_id: int, current: models.User
) -> models.Consultation:
    """Patients only see their own consultations; doctors and fundraisers see all."""
    query = db.query(models.Consultation).filter(models.Consultation.id == consultation_id)
    if current.role == models.ROLE_PATIENT:
        query = query.filter(models.Consultation.patient_id == current.id)
    c = query.first()
    if not c:
        raise HTTPException(status_code=404, detail="Consultation not found")
    return c


def _combine_symptoms(payload: schemas.ConsultationCreate) -> str:
    parts = [payload.symptoms.strip()] if payload.symptoms and payload.symptoms.strip() else []
    parts.extend(s.strip() for s in payload.selected_symptoms if s and s.strip())
    return ", ".join(parts)


@router.get("/common-symptoms", response_model=list[str])
def common_symptoms():
    return COMMON_SYMPTOMS


@router.post("/", response_model=schemas.ConsultationOut, status_code=status.HTTP_201_CREATED)
async def create_consultation(
    payload: schemas.ConsultationCreate,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_patient),
    analyzer: SymptomAnalyzer = Depends(get_analyzer),
):
    symptoms = _combine_symptoms(payload)
    if not symptoms:
        raise HTTPException(status_code=400, detail="Symptoms are required")

    try:
        analysis = await run_in_threadpool(analyzer.analyze, symptoms)
    except AnalysisError as exc:
        raise analysis_http_error(exc) from exc

    c = models.Consultation(
        patient_id=current.id,
        symptoms=symptoms,
        analysis=analysis,
        doctor_approved=False,
        fund_raised=0,
    )
    db.add(c)
    database.commit_or_raise(db, "save consultation")
    db.refresh(c)
    return serialize_consultation(c)


@router.get("/", response_model=list[schemas.ConsultationOut])
def list_consultations(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_user),
):
    query = db.query(models.Consultation)
    if current.role == models.ROLE_PATIENT:
        query = query.filter(models.Consultation.patient_id == current.id)
    rows = (
        query.order_by(models.Consultation.created_at.desc(), models.Consultation.id.desc())
        .all()
    )
    return [serialize_consultation(c) for c in rows]


@router.get("/needs-funding", response_model=list[schemas.ConsultationOut])
def list_needs_funding(
    db: Session = Depends(database.get_db),
    current: models.User = Depends(require_role(models.ROLE_DOCTOR, models.ROLE_FUNDRAISER)),
):
    rows = (
        db.query(models.Consultation)
        .filter(models.Consultation.doctor_approved.is_(True))
        .order_by(models.Consultation.created_at.desc(), models.Consultation.id.desc())
        .all()
    )
    return [serialize_consultation(c) for c in rows if lifecycle.needs_funding(c)]


@router.get("/{consultation_id}", response_model=schemas.ConsultationOut)
def get_consultation(
    consultation_id: int,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_user),
):
    return serialize_consultation(get_visible_consultation(db, consultation_id, current))


@router.post("/{consultation_id}/review", response_model=schemas.ConsultationOut)
def review_consultation(
    consultation_id: int,
    payload: schemas.ConsultationReview,
    db: Session = Depends(database.get_db),
    current: models.User = Depends(get_current_doctor),
):
    c = get_visible_consultation(db, consultation_id, current)
    lifecycle.review(
        db,
        c,
        current,
        approved=payload.approved,
        doctor_notes=payload.doctor_notes,
        prescription=payload.prescription,
    )
    database.commit_or_raise(db, "update consultation")
    db.refresh(c)
    return serialize_consultation(c)
