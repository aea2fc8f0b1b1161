import pytest
from fastapi.security import HTTPAuthorizationCredentials

from medbook.auth import jwt_handler
from medbook.auth.dependencies import get_current_identity, require_admin, require_patient
from medbook.core.errors import Forbidden, Unauthorized


def _credentials(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_get_current_identity_resolves_user_from_token(db_session, patient) -> None:
    token = jwt_handler.create_access_token(subject=patient.email)

    identity = get_current_identity(credentials=_credentials(token), db=db_session)

    assert identity.user_id == patient.id
    assert identity.email == patient.email
    assert identity.is_admin is False


def test_get_current_identity_accepts_mixed_case_subject(db_session, patient) -> None:
    token = jwt_handler.create_access_token(subject=patient.email.upper())

    assert get_current_identity(credentials=_credentials(token), db=db_session).user_id == patient.id


def test_get_current_identity_without_credentials(db_session) -> None:
    with pytest.raises(Unauthorized):
        get_current_identity(credentials=None, db=db_session)


def test_get_current_identity_rejects_expired_token(db_session, patient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr('medbook.core.config.JWT_EXPIRES_MINUTES', -5)
    token = jwt_handler.create_access_token(subject=patient.email)

    with pytest.raises(Unauthorized) as exception_info:
        get_current_identity(credentials=_credentials(token), db=db_session)

    assert exception_info.value.message == 'Token expired. Please login again.'


def test_get_current_identity_rejects_foreign_signature(db_session, patient) -> None:
    forged = jwt_handler.jwt.encode({'sub': patient.email, 'exp': 9999999999}, 'another-secret', algorithm='HS256')

    with pytest.raises(Unauthorized):
        get_current_identity(credentials=_credentials(forged), db=db_session)


def test_role_guards(patient_identity, admin_identity) -> None:
    assert require_patient(patient_identity) is patient_identity
    assert require_admin(admin_identity) is admin_identity

    with pytest.raises(Forbidden):
        require_patient(admin_identity)
    with pytest.raises(Forbidden):
        require_admin(patient_identity)
