import pytest

from ftms.core.config import Settings
from ftms.index.file_index import FileIndex
from ftms.ingestion.pipeline import FtmsService
from ftms.ingestion.storage import FileStorage
from ftms.models.file import FileRecord


@pytest.fixture
def settings(tmp_path):
    return Settings(
        STORAGE_DIR=tmp_path / "files",
        WORKSPACE_DIR=tmp_path / "workspace",
    )


@pytest.fixture
def storage(settings):
    return FileStorage.from_settings(settings)


@pytest.fixture
def index(settings):
    file_index = FileIndex.from_settings(settings)
    yield file_index
    file_index.close()


@pytest.fixture
def service(settings, storage, index):
    return FtmsService(storage=storage, index=index, settings=settings)


@pytest.fixture
def make_record():
    counter = {"n": 0}

    def factory(**overrides):
        counter["n"] += 1
        n = counter["n"]
        values = {
            "id": f"file-{n}",
            "filename": f"document-{n}.txt",
            "mime_type": "text/plain",
            "file_path": f"2024/05/0{n % 9 + 1}/file-{n}.txt",
            "file_size": 10 * n,
            "extracted_text": None,
            "ai_description": None,
            "session_id": None,
            "channel": None,
            "uploaded_at": f"2024-05-01T10:{n:02d}:00+00:00",
            "tags": None,
        }
        values.update(overrides)
        return FileRecord(**values)

    return factory
