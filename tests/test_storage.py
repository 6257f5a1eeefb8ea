import pytest

from prompt3d.storage import ArtifactStore


def test_root_is_created_idempotently(tmp_path):
    root = tmp_path / "a" / "b"

    ArtifactStore(root)
    ArtifactStore(root)

    assert root.is_dir()


def test_source_round_trip_and_artifact_size(store):
    paths = store.paths_for("job_1_abc")

    store.write_source(paths, "cube(1);")
    assert paths.source.read_text() == "cube(1);"
    assert store.artifact_size(paths) is None

    paths.artifact.write_bytes(b"solid x")
    assert store.artifact_size(paths) == 7

    store.discard_artifact(paths)
    store.discard_artifact(paths)
    assert not paths.artifact.exists()


def test_url_embeds_job_id():
    assert ArtifactStore.url_for("job_1_abc") == "/output/job_1_abc.stl"


def test_resolve_serves_files_under_root(store):
    paths = store.paths_for("job_1_abc")
    paths.artifact.write_bytes(b"solid x")

    assert store.resolve("job_1_abc.stl") == paths.artifact


@pytest.mark.parametrize("name", ["../secret.txt", "sub/../../x.stl", "/etc/passwd"])
def test_resolve_rejects_escapes(store, name):
    with pytest.raises(ValueError):
        store.resolve(name)


def test_resolve_missing_file(store):
    with pytest.raises(FileNotFoundError):
        store.resolve("job_missing.stl")
