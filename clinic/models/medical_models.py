from clinic.extensions import db
from clinic.utils.dates import utcnow, isoformat


class MedicalRecord(db.Model):
    """Demographic and clinical summary of a user. The most recently updated row is canonical."""
    __tablename__ = 'medical_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    birth_date = db.Column(db.String(32), nullable=False)
    is_diabetic = db.Column(db.Boolean, default=False)
    blood_type = db.Column(db.String(8))
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship('User', back_populates='medical_records')

    @classmethod
    def canonical_for(cls, user_id):
        return (cls.query.filter_by(user_id=user_id)
                .order_by(cls.updated_at.desc(), cls.id.desc())
                .first())

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'birthDate': self.birth_date,
            'isDiabetic': self.is_diabetic,
            'bloodType': self.blood_type,
            'notes': self.notes,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }


class DiseaseHistory(db.Model):
    __tablename__ = 'disease_histories'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    disease_name = db.Column(db.String(255), nullable=False)
    diagnosis_date = db.Column(db.DateTime, nullable=False, default=utcnow)
    treatment = db.Column(db.Text)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'diseaseName': self.disease_name,
            'diagnosisDate': isoformat(self.diagnosis_date),
            'treatment': self.treatment,
            'notes': self.notes,
            'createdAt': isoformat(self.created_at),
        }


class AllergyRecord(db.Model):
    __tablename__ = 'allergy_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    allergen = db.Column(db.String(255), nullable=False)
    reaction = db.Column(db.String(255))
    severity = db.Column(db.String(20))  # 'mild', 'moderate', 'severe'
    notes = db.Column(db.Text)
    recorded_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'allergen': self.allergen,
            'reaction': self.reaction,
            'severity': self.severity,
            'notes': self.notes,
            'recordedAt': isoformat(self.recorded_at),
        }


class BloodPressureRecord(db.Model):
    __tablename__ = 'blood_pressure_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    systolic = db.Column(db.Integer, nullable=False)
    diastolic = db.Column(db.Integer, nullable=False)
    pulse = db.Column(db.Integer)
    notes = db.Column(db.Text)
    measured_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'systolic': self.systolic,
            'diastolic': self.diastolic,
            'pulse': self.pulse,
            'notes': self.notes,
            'measuredAt': isoformat(self.measured_at),
        }


class BloodSugarRecord(db.Model):
    __tablename__ = 'blood_sugar_records'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    blood_sugar = db.Column(db.Float, nullable=False)  # mg/dL
    measurement_type = db.Column(db.String(20), nullable=False, default='random')
    notes = db.Column(db.Text)
    measured_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    user = db.relationship('User')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'bloodSugar': self.blood_sugar,
            'measurementType': self.measurement_type,
            'notes': self.notes,
            'measuredAt': isoformat(self.measured_at),
        }


class Medication(db.Model):
    __tablename__ = 'medications'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    name = db.Column(db.String(255), nullable=False)
    dosage = db.Column(db.String(100), nullable=False)
    frequency = db.Column(db.String(100), nullable=False)
    duration = db.Column(db.Integer)  # days
    start_date = db.Column(db.DateTime, nullable=False)
    end_date = db.Column(db.DateTime)
    notes = db.Column(db.Text)
    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship('User', back_populates='medications')

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'name': self.name,
            'dosage': self.dosage,
            'frequency': self.frequency,
            'duration': self.duration,
            'startDate': isoformat(self.start_date),
            'endDate': isoformat(self.end_date),
            'notes': self.notes,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
