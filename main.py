import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_FILE, LOG_LEVEL
from database import engine, Base

# --- IMPORT ROUTERS (APIs) ---
from routers import masters, students, results, result_reports, bulk_import
from routers.exams import router as exams_router

# --- IMPORT MODELS (registers every table on Base) ---
from models.masters import ClassMaster, SectionMaster
from models.students import Student
from models.exams import Subject, ExamType, ExamSchedule
from models.results import Result, ResultSubject

# --- LOGGING ---
logging.basicConfig(
    filename=LOG_FILE or None,
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# --- CREATE DATABASE TABLES ---
Base.metadata.create_all(bind=engine)

app = FastAPI(title="School Result Engine")

# ==========================================
# ✅ CORS MIDDLEWARE
# ==========================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# --- REGISTER ROUTERS ---
app.include_router(masters.router)
app.include_router(students.router)
app.include_router(exams_router)
app.include_router(result_reports.router)
app.include_router(results.router)
app.include_router(bulk_import.router)

logger.info("School Result Engine started (%d routes)", len(app.routes))


@app.get("/health")
def health():
    return {"status": "ok"}
