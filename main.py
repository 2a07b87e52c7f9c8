# main.py
import logging

from fastapi import Depends, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from aidoctor import config
from aidoctor import auth as auth_router
from aidoctor import consultations as consultations_router
from aidoctor import donations as donations_router
from aidoctor import stats as stats_router
from aidoctor.config_store import load_api_key, mask_key, resolve_api_key, save_api_key
from aidoctor.database import init_db
from aidoctor.gemini import AnalysisError, SymptomAnalyzer, analysis_http_error, get_analyzer
from aidoctor.schemas import AnalysisOut, SymptomsIn

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger("aidoctor")

app = FastAPI(title="AI Doctor", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router)
app.include_router(consultations_router.router)
app.include_router(donations_router.router)
app.include_router(stats_router.router)


class APIKeyIn(BaseModel):
    key: str


@app.on_event("startup")
def startup_event():
    init_db()
    logger.info("AI Doctor started (env=%s)", config.APP_ENV)


@app.get("/health")
def health():
    return {"status": "ok"}

# ---- KEY MANAGEMENT ENDPOINTS ----
@app.post("/save-key")
def save_key(payload: APIKeyIn):
    k = payload.key.strip()
    if not k:
        raise HTTPException(status_code=400, detail="Key cannot be empty")
    save_api_key(k)
    return {"message": "API key saved"}

@app.get("/get-key")
def get_key():
    k = load_api_key()
    if not k:
        raise HTTPException(status_code=404, detail="No API key found")
    return {"GEMINI_API_KEY": mask_key(k)}

# ---- AI ANALYSIS ----
@app.post("/analyze-symptoms", response_model=AnalysisOut)
async def analyze_symptoms(
    payload: SymptomsIn,
    analyzer: SymptomAnalyzer = Depends(get_analyzer),
):
    text = (payload.symptoms or "").strip()
    if not text:
        raise HTTPException(status_code=400, detail="Symptoms are required")
    try:
        analysis = await run_in_threadpool(analyzer.analyze, text)
    except AnalysisError as exc:
        logger.error("Error calling Gemini API: %s", exc)
        raise analysis_http_error(exc) from exc
    return {"analysis": analysis}

@app.get("/test-gemini")
async def test_gemini(analyzer: SymptomAnalyzer = Depends(get_analyzer)):
    results = await run_in_threadpool(analyzer.check_models)
    return {
        "success": True,
        "apiKeyConfigured": bool(resolve_api_key()),
        "testResults": results,
        "message": "Check testResults to see which models work",
    }
