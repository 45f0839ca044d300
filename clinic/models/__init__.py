from clinic.models.user_models import User, Role, Invitation, ADMIN_ONLY, STAFF
from clinic.models.medical_models import (
    MedicalRecord, DiseaseHistory, AllergyRecord, BloodPressureRecord, BloodSugarRecord, Medication
)
from clinic.models.appointment_models import Appointment, AppointmentStatus, InvalidTransition
from clinic.models.emergency_contact_models import EmergencyContact
from clinic.models.patient_profile_models import PatientProfile
from clinic.models.system_models import AuditLog, RevokedToken, SmtpSettings
