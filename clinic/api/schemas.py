# /clinic/api/schemas.py
"""Request payload schemas.

Clients speak camelCase (``measuredAt``, ``isMainContact``); every schema
accepts those aliases as well as the snake_case field names.
"""
from datetime import datetime
from typing import Annotated, Any, Dict, Literal, Optional, Union

from flask import request
from pydantic import (
    BaseModel, ConfigDict, EmailStr, Field, StrictBool, StrictFloat, StrictInt, StrictStr,
    ValidationError, field_validator,
)
from pydantic.alias_generators import to_camel

from clinic.models.appointment_models import AppointmentStatus


class PayloadError(Exception):
    """Raised when a request body is missing or fails validation. Rendered as a 400."""
    def __init__(self, message, details=None):
        super().__init__(message)
        self.message = message
        self.details = details or []


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra='ignore')


Name = Annotated[StrictStr, Field(min_length=1, max_length=255)]
Text = Optional[StrictStr]
Password = Annotated[StrictStr, Field(min_length=8, max_length=128)]
Username = Annotated[StrictStr, Field(min_length=3, max_length=64)]


def _not_null(value):
    # Partial updates may omit a required column but never clear it
    if value is None:
        raise ValueError('may be omitted but cannot be null')
    return value


# --- Identity ---

class RegisterRequest(CamelModel):
    username: Username
    password: Password
    email: Optional[EmailStr] = None


class LoginRequest(CamelModel):
    username: StrictStr
    password: StrictStr


class ChangePasswordRequest(CamelModel):
    current_password: StrictStr
    new_password: Password


# --- Medical records ---

class MedicalRecordIn(CamelModel):
    name: Name
    birth_date: Annotated[StrictStr, Field(min_length=1, max_length=32)]
    is_diabetic: StrictBool = False
    blood_type: Optional[Annotated[StrictStr, Field(max_length=8)]] = None
    notes: Text = None


class MedicalRecordUpdate(CamelModel):
    name: Optional[Name] = None
    birth_date: Optional[Annotated[StrictStr, Field(min_length=1, max_length=32)]] = None
    is_diabetic: Optional[StrictBool] = None
    blood_type: Optional[Annotated[StrictStr, Field(max_length=8)]] = None
    notes: Text = None

    @field_validator('name', 'birth_date')
    @classmethod
    def _required_columns(cls, value):
        return _not_null(value)


class ExportValidationRequest(CamelModel):
    encrypted_data: StrictStr


# --- Health logs ---

class DiseaseHistoryIn(CamelModel):
    disease_name: Name
    diagnosis_date: Optional[datetime] = None
    treatment: Text = None
    notes: Text = None


class AllergyRecordIn(CamelModel):
    allergen: Name
    reaction: Text = None
    severity: Optional[Literal['mild', 'moderate', 'severe']] = None
    notes: Text = None


class BloodPressureIn(CamelModel):
    systolic: Annotated[StrictInt, Field(gt=0, lt=400)]
    diastolic: Annotated[StrictInt, Field(gt=0, lt=300)]
    pulse: Optional[Annotated[StrictInt, Field(gt=0, lt=300)]] = None
    notes: Text = None


class BloodSugarIn(CamelModel):
    blood_sugar: Union[StrictInt, StrictFloat]
    measurement_type: Literal['fasting', 'before_meal', 'after_meal', 'bedtime', 'random'] = 'random'
    notes: Text = None

    @field_validator('blood_sugar')
    @classmethod
    def _positive(cls, value):
        if value <= 0:
            raise ValueError('blood sugar must be positive')
        return float(value)


class MedicationIn(CamelModel):
    name: Name
    dosage: Annotated[StrictStr, Field(min_length=1, max_length=100)]
    frequency: Annotated[StrictStr, Field(min_length=1, max_length=100)]
    start_date: datetime
    end_date: Optional[datetime] = None
    duration: Optional[Annotated[StrictInt, Field(ge=0)]] = None
    notes: Text = None


# --- Emergency contacts ---

class EmergencyContactIn(CamelModel):
    name: Name
    relationship: Annotated[StrictStr, Field(min_length=1, max_length=100)]
    phone_number: Annotated[StrictStr, Field(min_length=1, max_length=50)]
    email: Optional[EmailStr] = None
    city: Text = None
    state: Text = None
    zip_code: Text = None
    is_main_contact: StrictBool = False


class EmergencyContactUpdate(CamelModel):
    name: Optional[Name] = None
    relationship: Optional[Annotated[StrictStr, Field(min_length=1, max_length=100)]] = None
    phone_number: Optional[Annotated[StrictStr, Field(min_length=1, max_length=50)]] = None
    email: Optional[EmailStr] = None
    city: Text = None
    state: Text = None
    zip_code: Text = None
    is_main_contact: Optional[StrictBool] = None

    @field_validator('name', 'relationship', 'phone_number')
    @classmethod
    def _required_columns(cls, value):
        return _not_null(value)


# --- Appointments ---

class AppointmentIn(CamelModel):
    date: datetime
    department: Annotated[StrictStr, Field(min_length=1, max_length=100)]
    notes: Text = None


class RescheduleRequest(CamelModel):
    date: datetime


class AppointmentStatusUpdate(CamelModel):
    status: AppointmentStatus


# --- Patient profile ---

class PatientProfileIn(CamelModel):
    contact_channel: Optional[Literal['email', 'phone', 'sms']] = None
    reminders: Optional[Dict[str, StrictBool]] = None
    preferences: Optional[Dict[str, Any]] = None


# --- Admin ---

class SmtpSettingsIn(CamelModel):
    host: Annotated[StrictStr, Field(min_length=1, max_length=255)]
    port: Annotated[StrictInt, Field(ge=1, le=65535)]
    username: Annotated[StrictStr, Field(min_length=1, max_length=255)]
    password: Optional[StrictStr] = None
    from_email: EmailStr
    use_tls: StrictBool = True


class InvitationCreate(CamelModel):
    email: EmailStr
    role: Literal['user', 'subadmin']


class InvitationAccept(CamelModel):
    username: Username
    password: Password


def load_payload(schema):
    """Validates the JSON body of the current request against ``schema``.

    Raises PayloadError when the body is not a JSON object or fails validation.
    """
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise PayloadError('Request body must be a JSON object')
    try:
        return schema.model_validate(data)
    except ValidationError as e:
        details = [
            {'field': '.'.join(str(part) for part in err['loc']), 'message': err['msg']}
            for err in e.errors()
        ]
        raise PayloadError('Invalid input', details) from e
