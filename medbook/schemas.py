"""Response payloads shared by the public, patient and admin routers."""

from datetime import date, datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

from medbook.models.doctor import Doctor
from medbook.services.availability_ledger import is_bookable


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class AvailabilityResponse(CamelModel):
    status: str
    reason: str = ''
    expected_back_time: datetime | None = None
    last_updated: datetime | None = None
    updated_by: str = 'system'


class DoctorNoteResponse(CamelModel):
    id: int
    note: str
    created_at: datetime | None = None
    created_by: str


class DoctorResponse(CamelModel):
    id: int
    name: str
    email: str
    speciality: str
    image: str | None = None
    degree: str | None = None
    experience: str | None = None
    location: str | None = None
    phone: str | None = None
    rating: float | None = None
    consultation_fee: float | None = None
    is_active: bool
    available_slots: int
    availability: AvailabilityResponse
    is_bookable: bool

    @classmethod
    def from_doctor(cls, doctor: Doctor) -> 'DoctorResponse':
        return cls(
            id=doctor.id,
            name=doctor.name,
            email=doctor.email,
            speciality=doctor.speciality,
            image=doctor.image,
            degree=doctor.degree,
            experience=doctor.experience,
            location=doctor.location,
            phone=doctor.phone,
            rating=doctor.rating,
            consultation_fee=doctor.consultation_fee,
            is_active=bool(doctor.is_active),
            available_slots=doctor.available_slots or 0,
            availability=AvailabilityResponse(
                status=doctor.availability_status,
                reason=doctor.availability_reason or '',
                expected_back_time=doctor.expected_back_time,
                last_updated=doctor.availability_updated_at,
                updated_by=doctor.availability_updated_by or 'system',
            ),
            is_bookable=is_bookable(doctor),
        )


class AdminDoctorResponse(DoctorResponse):
    admin_notes: list[DoctorNoteResponse] = []

    @classmethod
    def from_doctor(cls, doctor: Doctor) -> 'AdminDoctorResponse':
        base = DoctorResponse.from_doctor(doctor)
        return cls(
            **base.model_dump(),
            admin_notes=[DoctorNoteResponse.model_validate(note) for note in doctor.notes],
        )


class AppointmentResponse(CamelModel):
    id: int
    user_id: int
    doctor_id: int
    slot_date: date
    slot_time: str
    status: str
    complaint: str | None = ''
    created_at: datetime | None = None
    updated_at: datetime | None = None
    doctor_name: str | None = None
    doctor_speciality: str | None = None
    doctor_avatar: str | None = None


class DoctorListEnvelope(BaseModel):
    success: bool = True
    doctors: list[DoctorResponse]


class AdminDoctorListEnvelope(BaseModel):
    success: bool = True
    doctors: list[AdminDoctorResponse]


class DoctorEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    doctor: DoctorResponse


class DoctorNoteEnvelope(BaseModel):
    success: bool = True
    note: DoctorNoteResponse


class AppointmentEnvelope(BaseModel):
    success: bool = True
    appointment: AppointmentResponse


class AppointmentListEnvelope(CamelModel):
    success: bool = True
    appointments: list[AppointmentResponse]
    total: int | None = None
    page: int | None = None
    page_size: int | None = None
