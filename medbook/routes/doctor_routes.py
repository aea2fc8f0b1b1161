import logging

from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from medbook.core.errors import InternalError
from medbook.database import ensure_database_ready, get_db
from medbook.schemas import DoctorListEnvelope, DoctorResponse
from medbook.services import availability_ledger

router = APIRouter(tags=['doctors'])

logger = logging.getLogger(__name__)


@router.get('', response_model=DoctorListEnvelope)
def list_doctors(db: Session = Depends(get_db)):
    ensure_database_ready()

    try:
        doctors = availability_ledger.list_doctors(db)
    except SQLAlchemyError as exc:
        logger.exception('Listing doctors failed')
        raise InternalError('Error fetching doctors.') from exc

    return DoctorListEnvelope(doctors=[DoctorResponse.from_doctor(doctor) for doctor in doctors])
