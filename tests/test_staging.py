import threading

import pytest

from tubely.core.errors import StagingError, ValidationError
from tubely.features.media import staging
from tubely.features.media.staging import LocalStagingArea, StagedFile

from conftest import BytesSource


@pytest.mark.anyio
async def test_stage_writes_in_chunks(tmp_path):
    area = LocalStagingArea(tmp_path / "assets", chunk_size=4)
    source = BytesSource(b"0123456789")

    staged = await area.stage(source, extension="mp4")

    assert staged.path.parent == tmp_path / "assets"
    assert staged.path.name == f"{staged.name}.mp4"
    assert staged.path.read_bytes() == b"0123456789"
    assert source.reads == 4  # 3 morceaux + EOF


@pytest.mark.anyio
async def test_stage_names_are_unique_and_urlsafe(tmp_path):
    area = LocalStagingArea(tmp_path)
    a = await area.stage(BytesSource(b"a"), extension="mp4")
    b = await area.stage(BytesSource(b"b"), extension="mp4")

    assert a.name != b.name
    assert len(a.name) >= 43  # 32 octets en base64
    assert set(a.name) <= set("ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_")


@pytest.mark.anyio
async def test_stage_over_limit_removes_partial_file(tmp_path):
    area = LocalStagingArea(tmp_path, chunk_size=4)

    with pytest.raises(ValidationError):
        await area.stage(BytesSource(b"x" * 20), extension="mp4", max_bytes=10)

    assert list(tmp_path.iterdir()) == []


@pytest.mark.anyio
async def test_stage_disk_error(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_bytes(b"")
    area = LocalStagingArea(blocker)

    with pytest.raises(StagingError):
        await area.stage(BytesSource(b"data"), extension="mp4")


@pytest.mark.anyio
async def test_release_is_idempotent(tmp_path):
    path = tmp_path / "clip.mp4"
    path.write_bytes(b"data")
    staged = StagedFile(path=path, name="clip")
    area = LocalStagingArea(tmp_path)

    await area.release(staged)
    await area.release(staged)

    assert not path.exists()


@pytest.mark.anyio
async def test_scope_releases_on_error(tmp_path):
    area = LocalStagingArea(tmp_path)

    with pytest.raises(RuntimeError):
        async with area.scope() as scope:
            staged = await scope.stage(BytesSource(b"data"), extension="mp4")
            derived = scope.reserve(staged.path.with_name(staged.path.name + ".processed"))
            derived.path.write_bytes(b"half written")
            raise RuntimeError("ffmpeg crashed")

    assert list(tmp_path.iterdir()) == []


@pytest.mark.anyio
async def test_scope_tolerates_reserved_path_never_written(tmp_path):
    area = LocalStagingArea(tmp_path)

    async with area.scope() as scope:
        await scope.stage(BytesSource(b"data"), extension="mp4")
        scope.reserve(tmp_path / "never-created.processed")

    assert list(tmp_path.iterdir()) == []


@pytest.mark.anyio
async def test_disk_calls_run_off_the_event_loop(tmp_path, monkeypatch):
    loop_thread = threading.get_ident()
    threads = []

    def recording(fn):
        def wrapper(path):
            threads.append((fn.__name__, threading.get_ident()))
            return fn(path)
        return wrapper

    monkeypatch.setattr(staging, "_create_file", recording(staging._create_file))
    monkeypatch.setattr(staging, "_remove_file", recording(staging._remove_file))

    area = LocalStagingArea(tmp_path / "assets")
    async with area.scope() as scope:
        await scope.stage(BytesSource(b"data"), extension="mp4")

    assert [name for name, _ in threads] == ["_create_file", "_remove_file"]
    assert all(ident != loop_thread for _, ident in threads)
