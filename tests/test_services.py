from datetime import date

import pytest

from eyemate.core.security import validate_national_id
from eyemate.models import MedicalDocument
from eyemate.services import document_service
from eyemate.services.document_service import DocumentError, DocumentService
from eyemate.services.iop_service import eye_statistics
from eyemate.services.patient_service import age_on


@pytest.mark.parametrize("national_id, valid", [
    ("1234567890121", True),
    ("1101700203450", True),
    ("1234567890123", False),
    ("123456789012", False),
    ("12345678901a1", False),
])
def test_national_id_checksum(national_id, valid):
    assert validate_national_id(national_id) is valid


def test_age_counts_birthdays():
    assert age_on(date(1960, 5, 1), date(2025, 4, 30)) == 64
    assert age_on(date(1960, 5, 1), date(2025, 5, 1)) == 65
    assert age_on(None, date(2025, 5, 1)) is None


def test_eye_statistics():
    stats = eye_statistics([18.0, None, 24.0], [20.0, 20.0, 20.0])
    assert stats == {"average": 21.0, "minimum": 18.0, "maximum": 24.0, "latest": 24.0, "above_target": 1}
    assert eye_statistics([None], [None]) == {"above_target": 0}


class TestDocumentService:

    def test_stores_file_under_upload_folder(self, db, factory, tmp_path):
        patient = factory.patient()

        document = DocumentService(db, upload_folder=str(tmp_path)).save_document(
            patient.id, "../../etc/scan.PNG", "image/png", b"\x89PNG data"
        )

        stored = tmp_path / document.file_path.split("/")[-1]
        assert stored.read_bytes() == b"\x89PNG data"
        assert stored.name.startswith(f"{patient.id}_") and stored.suffix == ".png"
        assert document.file_name == "scan.PNG"
        assert document.title == "scan.PNG"

    def test_rejects_empty_file(self, db, factory, tmp_path):
        with pytest.raises(DocumentError) as exc:
            DocumentService(db, upload_folder=str(tmp_path)).save_document(
                factory.patient().id, "a.pdf", "application/pdf", b""
            )
        assert exc.value.status_code == 400

    def test_rejects_large_file(self, db, factory, tmp_path, monkeypatch):
        monkeypatch.setattr(document_service.settings, "MAX_FILE_SIZE", 4)

        with pytest.raises(DocumentError) as exc:
            DocumentService(db, upload_folder=str(tmp_path)).save_document(
                factory.patient().id, "a.pdf", "application/pdf", b"12345"
            )
        assert exc.value.status_code == 413
        assert list(tmp_path.iterdir()) == []
        assert db.query(MedicalDocument).count() == 0
