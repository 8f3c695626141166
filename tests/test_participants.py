import json

from shared.storage.participants import ParticipantStore


def test_missing_file_starts_empty(tmp_path):
    store = ParticipantStore(tmp_path / "participants.json").load()
    assert len(store) == 0


def test_add_persists_and_reloads(tmp_path):
    path = tmp_path / "participants.json"
    store = ParticipantStore(path).load()

    assert store.add("UC-1") is True
    assert store.add("UC-1") is False
    assert json.loads(path.read_text()) == ["UC-1"]

    reloaded = ParticipantStore(path).load()
    assert "UC-1" in reloaded


def test_loads_legacy_display_name_list(tmp_path):
    path = tmp_path / "participants.json"
    path.write_text(json.dumps(["alice", "bob"]))

    store = ParticipantStore(path).load()
    assert list(store) == ["alice", "bob"]


def test_malformed_file_is_treated_as_empty(tmp_path):
    path = tmp_path / "participants.json"
    path.write_text("{not json")

    assert len(ParticipantStore(path).load()) == 0


def test_write_failure_keeps_memory_state(tmp_path):
    # the parent "directory" is a regular file, so every write fails
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    store = ParticipantStore(blocker / "participants.json")

    assert store.add("UC-1") is True
    assert "UC-1" in store
    assert store.save() is False


def test_failed_write_leaves_no_temp_files(tmp_path, monkeypatch):
    def disk_full(fd):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr("shared.storage.participants.os.fsync", disk_full)
    path = tmp_path / "participants.json"
    store = ParticipantStore(path)

    assert store.add("UC-1") is True
    assert store.add("UC-2") is True
    assert store.save() is False
    assert list(tmp_path.iterdir()) == []
