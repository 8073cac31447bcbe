import io
import json
from datetime import timedelta
from functools import partial
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from tubely.api.v1 import dependencies as deps
from tubely.core.config import Settings
from tubely.db.repositories.users import UserRepository
from tubely.db.repositories.videos import VideoRepository
from tubely.db.session import get_session, init_db
from tubely.features.media.pipeline import IngestionPipeline
from tubely.features.media.process import ProcessResult
from tubely.features.media.publisher import ObjectPublisher
from tubely.main import app
from tubely.security.tokens import JWTSettings, create_access_token
from tubely.utils.s3 import public_object_url


def ffprobe_output(width: int, height: int) -> bytes:
    return json.dumps({"programs": [], "streams": [{"width": width, "height": height}]}).encode()


class FakeRunner:
    """Remplace ffprobe/ffmpeg : ffmpeg "copie" l'entrée vers la sortie, même en cas d'échec."""

    def __init__(self):
        self.calls: List[Tuple[str, List[str]]] = []
        self.probe_result = ProcessResult(exit_code=0, stdout=ffprobe_output(1920, 1080), stderr=b"")
        self.ffmpeg_result = ProcessResult(exit_code=0, stdout=b"", stderr=b"")

    async def run(self, executable: str, args: Sequence[str]) -> ProcessResult:
        args = list(args)
        self.calls.append((executable, args))
        if "-show_entries" in args:
            return self.probe_result
        source = Path(args[args.index("-i") + 1])
        Path(args[-1]).write_bytes(source.read_bytes())
        return self.ffmpeg_result


class FakeS3:
    def __init__(self, error: Optional[Exception] = None):
        self.error = error
        self.objects = {}

    def upload_file(self, Filename, Bucket, Key, ExtraArgs=None):
        if self.error is not None:
            raise self.error
        self.objects[(Bucket, Key)] = (Path(Filename).read_bytes(), ExtraArgs)


class BytesSource:
    def __init__(self, data: bytes):
        self._buf = io.BytesIO(data)
        self.reads = 0

    async def read(self, size: int = -1) -> bytes:
        self.reads += 1
        return self._buf.read(size)


def staged_files(settings: Settings) -> List[Path]:
    root = Path(settings.ASSETS_ROOT)
    return sorted(root.iterdir()) if root.exists() else []


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        _env_file=None,
        ENV="test",
        DATABASE_URL="sqlite://",
        ASSETS_ROOT=tmp_path / "assets",
        JWT_SECRET_KEY="test-secret",
        S3_BUCKET="tubely-test",
        S3_REGION="eu-west-3",
        S3_CF_DISTRIBUTION=None,
        PUBLIC_BASE_URL="http://testserver",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(engine)
    return engine


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def owner(session):
    return UserRepository(session).create(email="owner@tubely.dev", hashed_password="x")


@pytest.fixture
def stranger(session):
    return UserRepository(session).create(email="stranger@tubely.dev", hashed_password="x")


@pytest.fixture
def video(session, owner):
    return VideoRepository(session).create(title="Boots of Speed", user_id=owner.id)


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def fake_s3() -> FakeS3:
    return FakeS3()


@pytest.fixture
def publisher(settings, fake_s3) -> ObjectPublisher:
    return ObjectPublisher(
        bucket=settings.S3_BUCKET,
        url_for=partial(public_object_url, settings),
        s3_client_factory=lambda: fake_s3,
    )


@pytest.fixture
def pipeline(settings, session, fake_runner, publisher) -> IngestionPipeline:
    return IngestionPipeline.from_settings(
        settings,
        repo=VideoRepository(session),
        runner=fake_runner,
        publisher=publisher,
    )


@pytest.fixture
def jwt_settings(settings) -> JWTSettings:
    return JWTSettings(
        secret=settings.JWT_SECRET_KEY,
        issuer=settings.JWT_ISSUER,
        access_ttl=timedelta(minutes=5),
    )


@pytest.fixture
def auth_header(jwt_settings):
    def make(user):
        token = create_access_token(user_id=user.id, settings=jwt_settings)
        return {"Authorization": f"Bearer {token}"}
    return make


@pytest.fixture
def client(settings, session, fake_runner, publisher):
    def _session():
        yield session

    app.dependency_overrides[get_session] = _session
    app.dependency_overrides[deps.get_settings] = lambda: settings
    app.dependency_overrides[deps.get_process_runner] = lambda: fake_runner
    app.dependency_overrides[deps.get_object_publisher] = lambda: publisher
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
