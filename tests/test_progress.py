import importlib
import json
import os

from progress import reset, set_status, set_done, set_nodes, set_result_url, snapshot


def test_set_done_no_args_defaults_to_solved():
    reset()
    set_done()
    snap = snapshot()
    assert snap["status"] == "Solved"
    assert snap["percent"] == 100.0
    assert snap["done"] is True
    assert snap["ok"] is True
    assert snap["result_url"] == ""


def test_set_done_failure_keeps_reason():
    reset()
    set_status("error")
    set_done(False, reason="No feasible arrangement found")
    snap = snapshot()
    assert snap["status"] == "Error"
    assert snap["message"] == "No feasible arrangement found"
    assert snap["done"] is True
    assert snap["ok"] is False


def test_set_result_url_tracks_navigation_target():
    reset()
    set_result_url("/result/latest")
    snap = snapshot()
    assert snap["result_url"] == "/result/latest"
    assert snap["done"] is False


def test_reset_increments_run_identifier():
    reset()
    first = snapshot()["run_id"]
    reset()
    second = snapshot()["run_id"]
    assert second == first + 1


def test_counters_clamp_bad_values():
    reset()
    set_nodes("12")
    assert snapshot()["nodes"] == 12
    set_nodes(-3)
    assert snapshot()["nodes"] == 0
    set_nodes("lots")
    assert snapshot()["nodes"] == 0


def test_snapshot_reads_state_written_by_other_process(tmp_path, monkeypatch):
    import progress as progress_module

    state_path = tmp_path / "state.json"
    monkeypatch.setenv("PROGRESS_STATE_FILE", str(state_path))
    progress = importlib.reload(progress_module)

    try:
        progress.reset()
        progress.set_phase("precheck")
        first = progress.snapshot()
        assert first["phase"] == "precheck"

        data = dict(first)
        data["phase"] = "backtracking"
        data["nodes"] = 42
        state_path.write_text(json.dumps(data))
        os.utime(state_path, None)

        with progress.PROGRESS_LOCK:
            progress.PROGRESS["phase"] = ""
            progress._LAST_STATE_MTIME = 0.0

        snap = progress.snapshot()
        assert snap["phase"] == "backtracking"
        assert snap["nodes"] == 42
    finally:
        monkeypatch.delenv("PROGRESS_STATE_FILE", raising=False)
        importlib.reload(progress_module)
