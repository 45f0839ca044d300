# /clinic/api/routes.py
from clinic.api import api_bp
from clinic.api.controllers import (
    admin_controller, appointment_controller, auth_controller, emergency_contact_controller,
    health_log_controller, invitation_controller, medical_record_controller,
    patient_profile_controller, smtp_controller,
)
from clinic.extensions import limiter
from clinic.models.user_models import ADMIN_ONLY, STAFF
from clinic.utils.decorators import audit_log, role_required


# --- Authentication Endpoints ---
@api_bp.route('/register', methods=['POST'])
@limiter.limit("5 per hour")
@audit_log("USER_REGISTRATION", "users")
def register():
    return auth_controller.register_user()

@api_bp.route('/login', methods=['POST'])
@limiter.limit("10 per minute")
@audit_log("USER_LOGIN", "authentication")
def login():
    return auth_controller.login_user()

@api_bp.route('/logout', methods=['POST'])
@role_required()
@audit_log("USER_LOGOUT", "authentication")
def logout():
    return auth_controller.logout_user()

@api_bp.route('/user', methods=['GET'])
@role_required()
def get_user():
    return auth_controller.get_current_user()

@api_bp.route('/user/change-password', methods=['POST'])
@role_required()
@audit_log("PASSWORD_CHANGE", "authentication")
def change_password():
    return auth_controller.change_user_password()


# --- Medical Record Endpoints ---
@api_bp.route('/medical-records', methods=['GET'])
@role_required()
def get_medical_records():
    return medical_record_controller.get_records()

@api_bp.route('/medical-records', methods=['POST'])
@role_required()
@audit_log("SAVE_MEDICAL_RECORD", "medical_records")
def save_medical_record():
    return medical_record_controller.save_record()

@api_bp.route('/medical-records/<int:record_id>', methods=['PUT'])
@role_required()
@audit_log("UPDATE_MEDICAL_RECORD", "medical_records")
def update_medical_record(record_id):
    return medical_record_controller.update_record(record_id)

@api_bp.route('/medical-records/<int:record_id>', methods=['DELETE'])
@role_required()
@audit_log("DELETE_MEDICAL_RECORD", "medical_records")
def delete_medical_record(record_id):
    return medical_record_controller.delete_record(record_id)

@api_bp.route('/medical-records/export', methods=['GET'])
@role_required()
@audit_log("EXPORT_MEDICAL_RECORDS", "medical_records")
def export_medical_records():
    return medical_record_controller.export_records()

@api_bp.route('/medical-records/validate-export', methods=['POST'])
@role_required()
def validate_medical_record_export():
    return medical_record_controller.validate_export()


# --- Health Log Endpoints ---
@api_bp.route('/disease-histories', methods=['GET'])
@role_required()
def get_disease_histories():
    return health_log_controller.list_entries('disease_history')

@api_bp.route('/disease-histories', methods=['POST'])
@role_required()
@audit_log("CREATE_DISEASE_HISTORY", "disease_histories")
def create_disease_history():
    return health_log_controller.create_entry('disease_history')

@api_bp.route('/disease-histories/<int:entry_id>', methods=['DELETE'])
@role_required()
@audit_log("DELETE_DISEASE_HISTORY", "disease_histories")
def delete_disease_history(entry_id):
    return health_log_controller.delete_entry('disease_history', entry_id)

@api_bp.route('/allergy-records', methods=['GET'])
@role_required()
def get_allergy_records():
    return health_log_controller.list_entries('allergy_record')

@api_bp.route('/allergy-records', methods=['POST'])
@role_required()
@audit_log("CREATE_ALLERGY_RECORD", "allergy_records")
def create_allergy_record():
    return health_log_controller.create_entry('allergy_record')

@api_bp.route('/allergy-records/<int:entry_id>', methods=['DELETE'])
@role_required()
@audit_log("DELETE_ALLERGY_RECORD", "allergy_records")
def delete_allergy_record(entry_id):
    return health_log_controller.delete_entry('allergy_record', entry_id)

@api_bp.route('/blood-pressure', methods=['GET'])
@role_required()
def get_blood_pressure():
    return health_log_controller.list_entries('blood_pressure')

@api_bp.route('/blood-pressure', methods=['POST'])
@role_required()
@audit_log("CREATE_BLOOD_PRESSURE", "blood_pressure")
def create_blood_pressure():
    return health_log_controller.create_entry('blood_pressure')

@api_bp.route('/blood-pressure/<int:entry_id>', methods=['DELETE'])
@role_required()
@audit_log("DELETE_BLOOD_PRESSURE", "blood_pressure")
def delete_blood_pressure(entry_id):
    return health_log_controller.delete_entry('blood_pressure', entry_id)

@api_bp.route('/blood-sugar', methods=['GET'])
@role_required()
def get_blood_sugar():
    return health_log_controller.list_entries('blood_sugar')

@api_bp.route('/blood-sugar', methods=['POST'])
@role_required()
@audit_log("CREATE_BLOOD_SUGAR", "blood_sugar")
def create_blood_sugar():
    return health_log_controller.create_entry('blood_sugar')

@api_bp.route('/blood-sugar/<int:entry_id>', methods=['DELETE'])
@role_required()
@audit_log("DELETE_BLOOD_SUGAR", "blood_sugar")
def delete_blood_sugar(entry_id):
    return health_log_controller.delete_entry('blood_sugar', entry_id)

@api_bp.route('/medications', methods=['GET'])
@role_required()
def get_medications():
    return health_log_controller.list_entries('medication')

@api_bp.route('/medications', methods=['POST'])
@role_required()
@audit_log("CREATE_MEDICATION", "medications")
def create_medication():
    return health_log_controller.create_entry('medication')

@api_bp.route('/medications/<int:entry_id>', methods=['DELETE'])
@role_required()
@audit_log("DELETE_MEDICATION", "medications")
def delete_medication(entry_id):
    return health_log_controller.delete_entry('medication', entry_id)


# --- Emergency Contact Endpoints ---
@api_bp.route('/emergency-contacts', methods=['GET'])
@role_required()
def get_emergency_contacts():
    return emergency_contact_controller.get_contacts()

@api_bp.route('/emergency-contacts', methods=['POST'])
@role_required()
@audit_log("CREATE_EMERGENCY_CONTACT", "emergency_contacts")
def create_emergency_contact():
    return emergency_contact_controller.create_contact()

@api_bp.route('/emergency-contacts/<int:contact_id>', methods=['PUT'])
@role_required()
@audit_log("UPDATE_EMERGENCY_CONTACT", "emergency_contacts")
def update_emergency_contact(contact_id):
    return emergency_contact_controller.update_contact(contact_id)

@api_bp.route('/emergency-contacts/<int:contact_id>', methods=['DELETE'])
@role_required()
@audit_log("DELETE_EMERGENCY_CONTACT", "emergency_contacts")
def delete_emergency_contact(contact_id):
    return emergency_contact_controller.delete_contact(contact_id)

@api_bp.route('/emergency-contacts/<int:contact_id>/main', methods=['PUT'])
@role_required()
@audit_log("SET_MAIN_EMERGENCY_CONTACT", "emergency_contacts")
def set_main_emergency_contact(contact_id):
    return emergency_contact_controller.set_main_contact(contact_id)


# --- Appointment Endpoints ---
@api_bp.route('/appointments', methods=['GET'])
@role_required()
def get_appointments():
    return appointment_controller.get_appointments()

@api_bp.route('/appointments', methods=['POST'])
@role_required()
@audit_log("CREATE_APPOINTMENT", "appointments")
def create_appointment():
    return appointment_controller.create_appointment()

@api_bp.route('/appointments/<int:appointment_id>', methods=['GET'])
@role_required()
def get_appointment(appointment_id):
    return appointment_controller.get_appointment(appointment_id)

@api_bp.route('/appointments/<int:appointment_id>/cancel', methods=['PUT'])
@role_required()
@audit_log("CANCEL_APPOINTMENT", "appointments")
def cancel_appointment(appointment_id):
    return appointment_controller.cancel_appointment(appointment_id)

@api_bp.route('/appointments/<int:appointment_id>/reschedule', methods=['PUT'])
@role_required()
@audit_log("RESCHEDULE_APPOINTMENT", "appointments")
def reschedule_appointment(appointment_id):
    return appointment_controller.reschedule_appointment(appointment_id)

@api_bp.route('/appointments/<int:appointment_id>', methods=['DELETE'])
@role_required()
@audit_log("DELETE_APPOINTMENT", "appointments")
def delete_appointment(appointment_id):
    return appointment_controller.delete_appointment(appointment_id)


# --- Patient Profile Endpoints ---
@api_bp.route('/patient-profile', methods=['GET'])
@role_required()
def get_patient_profile():
    return patient_profile_controller.get_profile()

@api_bp.route('/patient-profile', methods=['PUT'])
@role_required()
@audit_log("UPDATE_PATIENT_PROFILE", "patient_profiles")
def update_patient_profile():
    return patient_profile_controller.update_profile()


# --- Admin Endpoints ---
@api_bp.route('/admin/users', methods=['GET'])
@role_required(*ADMIN_ONLY)
@audit_log("VIEW_ALL_USERS", "users")
def admin_get_users():
    return admin_controller.get_all_users()

@api_bp.route('/admin/user-details/<int:user_id>', methods=['GET'])
@role_required(*ADMIN_ONLY)
@audit_log("VIEW_USER_DETAILS", "users")
def admin_get_user_details(user_id):
    return admin_controller.get_user_details(user_id)

@api_bp.route('/admin/stats', methods=['GET'])
@role_required(*ADMIN_ONLY)
def admin_get_stats():
    return admin_controller.get_stats()

@api_bp.route('/admin/recent-appointments', methods=['GET'])
@role_required(*ADMIN_ONLY)
def admin_get_recent_appointments():
    return admin_controller.get_recent_appointments()

@api_bp.route('/admin/subadmins', methods=['GET'])
@role_required(*ADMIN_ONLY)
def admin_get_subadmins():
    return admin_controller.get_subadmins()

@api_bp.route('/admin/appointments/<int:appointment_id>/status', methods=['PUT'])
@role_required(*ADMIN_ONLY)
@audit_log("UPDATE_APPOINTMENT_STATUS", "appointments")
def admin_update_appointment_status(appointment_id):
    return admin_controller.update_appointment_status(appointment_id)

@api_bp.route('/admin/smtp-settings', methods=['GET'])
@role_required(*ADMIN_ONLY)
def admin_get_smtp_settings():
    return smtp_controller.get_smtp_settings()

@api_bp.route('/admin/smtp-settings', methods=['POST'])
@role_required(*ADMIN_ONLY)
@audit_log("UPDATE_SMTP_SETTINGS", "smtp_settings")
def admin_update_smtp_settings():
    return smtp_controller.update_smtp_settings()

@api_bp.route('/admin/invite', methods=['POST'])
@role_required(*ADMIN_ONLY)
@audit_log("CREATE_INVITATION", "invitations")
def admin_create_invitation():
    return invitation_controller.create_invitation()


# --- Staff Oversight Endpoints ---
@api_bp.route('/admin/medical-records', methods=['GET'])
@role_required(*STAFF)
@audit_log("VIEW_ALL_MEDICAL_RECORDS", "medical_records")
def admin_get_medical_records():
    return admin_controller.list_all('medical_records')

@api_bp.route('/admin/blood-pressure', methods=['GET'])
@role_required(*STAFF)
@audit_log("VIEW_ALL_BLOOD_PRESSURE", "blood_pressure")
def admin_get_blood_pressure():
    return admin_controller.list_all('blood_pressure')

@api_bp.route('/admin/blood-sugar', methods=['GET'])
@role_required(*STAFF)
@audit_log("VIEW_ALL_BLOOD_SUGAR", "blood_sugar")
def admin_get_blood_sugar():
    return admin_controller.list_all('blood_sugar')

@api_bp.route('/admin/disease-histories', methods=['GET'])
@role_required(*STAFF)
@audit_log("VIEW_ALL_DISEASE_HISTORIES", "disease_histories")
def admin_get_disease_histories():
    return admin_controller.list_all('disease_histories')

@api_bp.route('/admin/medications', methods=['GET'])
@role_required(*STAFF)
@audit_log("VIEW_ALL_MEDICATIONS", "medications")
def admin_get_medications():
    return admin_controller.list_all('medications')

@api_bp.route('/admin/appointments', methods=['GET'])
@role_required(*STAFF)
@audit_log("VIEW_ALL_APPOINTMENTS", "appointments")
def admin_get_appointments():
    return admin_controller.list_all('appointments')

@api_bp.route('/admin/emergency-contacts', methods=['GET'])
@role_required(*STAFF)
@audit_log("VIEW_ALL_EMERGENCY_CONTACTS", "emergency_contacts")
def admin_get_emergency_contacts():
    return admin_controller.list_all('emergency_contacts')

@api_bp.route('/admin/emergency-contacts/<int:contact_id>', methods=['PUT'])
@role_required(*STAFF)
@audit_log("ADMIN_UPDATE_EMERGENCY_CONTACT", "emergency_contacts")
def admin_update_emergency_contact(contact_id):
    return admin_controller.update_emergency_contact(contact_id)

@api_bp.route('/admin/emergency-contacts/<int:contact_id>', methods=['DELETE'])
@role_required(*STAFF)
@audit_log("ADMIN_DELETE_EMERGENCY_CONTACT", "emergency_contacts")
def admin_delete_emergency_contact(contact_id):
    return admin_controller.delete_emergency_contact(contact_id)


# --- Invitation Endpoints (public) ---
@api_bp.route('/invitations/<token>', methods=['GET'])
@limiter.limit("30 per minute")
def check_invitation(token):
    return invitation_controller.check_invitation(token)

@api_bp.route('/invitations/<token>/accept', methods=['POST'])
@limiter.limit("10 per hour")
@audit_log("ACCEPT_INVITATION", "invitations")
def accept_invitation(token):
    return invitation_controller.accept_invitation(token)
