"""
Shared fixtures: in-memory database, fake push gateway, fixed clock
"""
import os
import tempfile

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SCHEDULER_ENABLED", "false")
os.environ.setdefault("UPLOAD_FOLDER", tempfile.mkdtemp(prefix="eyemate-uploads-"))
os.environ.setdefault("VAPID_PUBLIC_KEY", "")

from datetime import date, datetime, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from eyemate.core.clock import fixed_clock
from eyemate.core.database import create_tables, drop_tables, get_db
from eyemate.core.dependencies import get_push_gateway
from eyemate.models import (
    Appointment,
    AppointmentStatus,
    Medication,
    MedicationDose,
    DoseStatus,
    MedicationReminder,
    ReminderStatus,
    Patient,
    PatientMedication,
    PushSubscription,
    User,
    UserRole,
)
from eyemate.services.push_service import DeliveryStatus, PushGateway, PushService

# Monday morning in local time
NOW = datetime(2025, 3, 10, 8, 0)


class FakeGateway(PushGateway):
    """Records every delivery; outcomes can be set per endpoint"""

    def __init__(self):
        self.deliveries = []
        self.outcomes = {}

    def deliver(self, endpoint, keys, payload):
        self.deliveries.append((endpoint, payload))
        return self.outcomes.get(endpoint, DeliveryStatus.OK)

    @property
    def titles(self):
        return [payload["title"] for _, payload in self.deliveries]


class Factory:
    """Builds committed rows for tests"""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, **kwargs):
        self._seq += 1
        kwargs.setdefault("national_id", str(3000000000000 + self._seq))
        kwargs.setdefault("name", f"Patient {self._seq}")
        kwargs.setdefault("hashed_password", "not-a-real-hash")
        kwargs.setdefault("role", UserRole.PATIENT)
        return self._save(User(**kwargs))

    def patient(self, user=None, **kwargs):
        user = user or self.user()
        return self._save(Patient(user_id=user.id, **kwargs))

    def medication(self, patient, name="Timolol 0.5%", **kwargs):
        catalog = self._save(Medication(name=name, type="beta blocker"))
        kwargs.setdefault("dosage", "1 drop")
        return self._save(PatientMedication(patient_id=patient.id, medication_id=catalog.id, **kwargs))

    def reminder(self, patient_medication, at=time(8, 0), status=ReminderStatus.PENDING):
        return self._save(MedicationReminder(
            patient_id=patient_medication.patient_id,
            patient_medication_id=patient_medication.id,
            reminder_time=at,
            status=status,
        ))

    def dose(self, patient_medication, at, status=DoseStatus.TAKEN):
        return self._save(MedicationDose(
            patient_medication_id=patient_medication.id,
            scheduled_time=at,
            actual_time=at,
            status=status,
        ))

    def appointment(self, patient, day, at=time(10, 0), status=AppointmentStatus.SCHEDULED):
        return self._save(Appointment(
            patient_id=patient.id,
            appointment_date=day,
            appointment_time=at,
            doctor_name="Dr. Somchai",
            status=status,
        ))

    def subscription(self, user, endpoint=None, is_active=True):
        self._seq += 1
        return self._save(PushSubscription(
            user_id=user.id,
            endpoint=endpoint or f"https://push.example.com/{self._seq}",
            p256dh_key="p256dh",
            auth_key="auth",
            is_active=is_active,
        ))


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(bind=engine)
    yield engine
    drop_tables(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def factory(db):
    return Factory(db)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def clock():
    return fixed_clock(NOW)


@pytest.fixture
def push_service(db, gateway, clock):
    return PushService(db, gateway, clock)


@pytest.fixture
def client(session_factory, gateway):
    from eyemate.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_push_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(client):
    """Register and log in a patient through the API"""
    payload = {
        "national_id": "1101700203450",
        "name": "Somsri Jaidee",
        "password": "eyedrops123",
        "confirm_password": "eyedrops123",
        "email": "somsri@example.com",
        "date_of_birth": date(1960, 5, 1).isoformat(),
        "glaucoma_type": "POAG",
    }
    response = client.post("/api/auth/register", json=payload)
    assert response.status_code == 201, response.text

    response = client.post("/api/auth/login", data={"username": payload["national_id"], "password": payload["password"]})
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
