# aidoctor/schemas.py
from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, EmailStr

from .medicines import Medicine

Role = Literal["patient", "doctor", "fundraiser"]


# Auth
class UserSignup(BaseModel):
    full_name: Optional[str] = None
    email: EmailStr
    password: str
    role: Role = "patient"

class UserLogin(BaseModel):
    email: EmailStr
    password: str

class UserOut(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str]
    role: Role
    class Config:
        from_attributes = True

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    role: Role


# AI analysis
class SymptomsIn(BaseModel):
    symptoms: str = ""

class AnalysisOut(BaseModel):
    analysis: str


# Consultations
class ConsultationCreate(BaseModel):
    symptoms: str = ""
    selected_symptoms: List[str] = []

class ConsultationReview(BaseModel):
    approved: bool
    doctor_notes: Optional[str] = None
    prescription: Optional[str] = None

class ConsultationOut(BaseModel):
    id: int
    patient_id: int
    symptoms: str
    analysis: str
    doctor_approved: bool
    fund_raised: float
    doctor_notes: Optional[str]
    prescription: Optional[str]
    approved_by: Optional[int]
    reviewed_at: Optional[datetime]
    created_at: Optional[datetime]
    status: str
    medicines: List[Medicine]
    medicine_total: float


# Donations
class DonationCreate(BaseModel):
    amount: str
    donor_name: Optional[str] = None
    donor_email: Optional[str] = None
    notes: Optional[str] = None

class FundRaisedUpdate(BaseModel):
    amount: str

class DonationOut(BaseModel):
    id: int
    consultation_id: int
    fundraiser_id: int
    amount: float
    donor_name: Optional[str]
    donor_email: Optional[str]
    notes: Optional[str]
    created_at: Optional[datetime]
    class Config:
        from_attributes = True

class DonationReceipt(BaseModel):
    donation: DonationOut
    consultation: ConsultationOut


# Stats
class DoctorStats(BaseModel):
    total_consultations: int
    approved_consultations: int
    pending_consultations: int
    total_points: int

class FundraiserStats(BaseModel):
    total_raised: float
    total_donations: int
    active_campaigns: int
    consultations_helped: int

class ShareLinks(BaseModel):
    text: str
    links: Dict[str, str]
