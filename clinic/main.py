import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from clinic.core import config
from clinic.database import Base, engine, ensure_appointment_schema, ensure_patient_schema
from clinic.models import appointment, patient, therapist  # noqa: F401
from clinic.routes import (
    appointment_routes,
    patient_routes,
    report_routes,
    scheduling_routes,
    therapist_routes,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)

app = FastAPI(title='Therapy Clinic Scheduling API')

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

logger = logging.getLogger(__name__)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()

    try:
        Base.metadata.create_all(bind=engine)
        ensure_appointment_schema()
        ensure_patient_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'status': 'Therapy Clinic API Running'}


app.include_router(therapist_routes.router, prefix='/therapists')
app.include_router(patient_routes.router, prefix='/patients')
app.include_router(appointment_routes.router, prefix='/appointments')
app.include_router(scheduling_routes.router, prefix='/scheduling')
app.include_router(report_routes.router, prefix='/reports')
