import enum

from clinic.extensions import db
from clinic.utils.dates import utcnow, isoformat


class AppointmentStatus(str, enum.Enum):
    PENDING = 'pending'
    CONFIRMED = 'confirmed'
    COMPLETED = 'completed'
    CANCELLED = 'cancelled'


# pending -> confirmed -> completed, and pending|confirmed -> cancelled
ALLOWED_TRANSITIONS = {
    AppointmentStatus.PENDING: frozenset({AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CONFIRMED: frozenset({AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELLED: frozenset(),
}


class InvalidTransition(ValueError):
    pass


class Appointment(db.Model):
    """Model for storing a user's clinic appointment."""
    __tablename__ = 'appointments'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    date = db.Column(db.DateTime, nullable=False)
    department = db.Column(db.String(100), nullable=False)
    notes = db.Column(db.Text)
    status = db.Column(
        db.Enum(AppointmentStatus, name='appointment_status', values_callable=lambda s: [m.value for m in s]),
        nullable=False,
        default=AppointmentStatus.PENDING,
    )

    created_at = db.Column(db.DateTime, default=utcnow)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)

    user = db.relationship('User', back_populates='appointments')

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.status]

    @property
    def is_deletable(self) -> bool:
        return self.status == AppointmentStatus.CANCELLED

    def transition_to(self, new_status: AppointmentStatus) -> None:
        """Moves the appointment to ``new_status`` or raises InvalidTransition."""
        new_status = AppointmentStatus(new_status)
        if new_status not in ALLOWED_TRANSITIONS[self.status]:
            raise InvalidTransition(
                f"Cannot change appointment status from '{self.status.value}' to '{new_status.value}'"
            )
        self.status = new_status

    def reschedule(self, new_date) -> None:
        """Moves a non-terminal appointment to ``new_date``. The status is left alone."""
        if self.is_terminal:
            raise InvalidTransition(f"A {self.status.value} appointment cannot be rescheduled")
        self.date = new_date

    def to_dict(self):
        return {
            'id': self.id,
            'userId': self.user_id,
            'date': isoformat(self.date),
            'department': self.department,
            'notes': self.notes,
            'status': self.status.value,
            'createdAt': isoformat(self.created_at),
            'updatedAt': isoformat(self.updated_at),
        }
