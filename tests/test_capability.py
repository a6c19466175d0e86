import os
import pickle

import pytest

from lanshare.capability import Capability, CapabilityBroker
from lanshare.errors import InvalidCapability, LanshareError, SelectionCancelled, SelectionFailed
from lanshare.storage.marker import MarkerStore


def broker_for(answer, tmp_path=None):
    markers = MarkerStore(tmp_path / "state.json") if tmp_path else None

    def picker():
        if isinstance(answer, BaseException):
            raise answer
        return answer

    return CapabilityBroker(picker, markers)


def test_acquire_returns_capability(shared_file):
    cap = broker_for(str(shared_file)).acquire()
    assert cap.is_valid
    assert cap.path == shared_file.resolve()


def test_acquire_does_not_set_marker(shared_file, tmp_path):
    broker = broker_for(shared_file, tmp_path)
    broker.acquire()
    assert broker.has_prior_grant_marker() is False
    assert broker.mark_granted() is True
    assert broker.has_prior_grant_marker() is True


@pytest.mark.parametrize("answer", [None, KeyboardInterrupt(), EOFError()])
def test_cancel_is_distinct_from_failure(answer):
    with pytest.raises(SelectionCancelled) as excinfo:
        broker_for(answer).acquire()
    assert not isinstance(excinfo.value, LanshareError)


def test_picker_error_is_selection_failed():
    with pytest.raises(SelectionFailed):
        broker_for(RuntimeError("no picker on this platform")).acquire()


def test_non_json_file_is_rejected(tmp_path):
    other = tmp_path / "notes.txt"
    other.write_text("[]")
    with pytest.raises(SelectionFailed):
        broker_for(other).acquire()


def test_missing_file_is_rejected(tmp_path):
    with pytest.raises(SelectionFailed):
        broker_for(tmp_path / "missing.json").acquire()


def test_directory_is_rejected(tmp_path):
    folder = tmp_path / "folder.json"
    folder.mkdir()
    with pytest.raises(SelectionFailed):
        broker_for(folder).acquire()


def test_released_capability_refuses_io(shared_file):
    with Capability(shared_file) as cap:
        assert cap.read_text() == "[]"
    assert not cap.is_valid
    with pytest.raises(InvalidCapability):
        cap.read_text()
    with pytest.raises(InvalidCapability):
        cap.write_text("[]")


def test_capability_cannot_be_pickled(capability):
    with pytest.raises(TypeError):
        pickle.dumps(capability)


def test_each_grant_gets_its_own_token(shared_file):
    broker = broker_for(shared_file)
    assert broker.acquire().token != broker.acquire().token


def test_broker_without_marker_store_reports_no_marker(shared_file):
    broker = broker_for(shared_file)
    assert broker.mark_granted() is False
    assert broker.has_prior_grant_marker() is False


@pytest.mark.skipif(not hasattr(os, "geteuid") or os.geteuid() == 0, reason="root ignores folder permissions")
def test_read_only_folder_is_rejected(tmp_path):
    folder = tmp_path / "readonly"
    folder.mkdir()
    path = folder / "shared.json"
    path.write_text("[]")
    path.chmod(0o666)
    folder.chmod(0o555)
    try:
        with pytest.raises(SelectionFailed):
            broker_for(path).acquire()
    finally:
        folder.chmod(0o755)
