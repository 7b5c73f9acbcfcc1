import os
import tempfile
import time
from pathlib import Path

from tubegrab.core.config import Settings, cleanup_settings
from tubegrab.managers import file_manager, job_manager
from tubegrab.managers.cleanup_scheduler import CleanupScheduler


def _age(path, minutes):
    old = time.time() - minutes * 60
    os.utime(path, (old, old))


def test_temp_paths_are_unique_and_not_created(temp_dir):
    first = file_manager.create_temp_path()
    second = file_manager.create_temp_path()

    assert first != second
    assert first.parent == temp_dir
    assert not first.exists()


def test_remove_job_files_removes_partials_only_for_that_job(temp_dir):
    target = file_manager.create_temp_path()
    other = file_manager.create_temp_path()
    for path in (target, target.with_name(target.name + ".part"), target.with_name(f"{target.stem}.f137.mp4"), other):
        path.write_bytes(b"x")

    removed = file_manager.remove_job_files(target)

    assert removed == 3
    assert [p.name for p in temp_dir.iterdir()] == [other.name]


def test_remove_quietly_on_missing_file(temp_dir):
    assert file_manager.remove_quietly(temp_dir / "missing.mp4") is False


def test_stale_temp_files_are_swept(temp_dir):
    stale = file_manager.create_temp_path()
    fresh = file_manager.create_temp_path()
    unrelated = temp_dir / "other_stale.mp4"
    for path in (stale, fresh, unrelated):
        path.write_bytes(b"x")
    _age(stale, 180)
    _age(unrelated, 180)

    removed = file_manager.cleanup_stale_temp_files(max_age_minutes=120)

    assert removed == 1
    assert not stale.exists()
    assert fresh.exists()
    assert unrelated.exists()


def test_sweep_keeps_foreign_files_with_the_same_prefix(temp_dir):
    foreign = [temp_dir / "yt_other_app_cache.json", temp_dir / "yt_stale.mp4"]
    own_partial = file_manager.create_temp_path()
    own_partial = own_partial.with_name(own_partial.name + ".part")
    for path in foreign + [own_partial]:
        path.write_bytes(b"x")
        _age(path, 180)

    removed = file_manager.cleanup_stale_temp_files(max_age_minutes=120)

    assert removed == 1
    assert not own_partial.exists()
    assert all(path.exists() for path in foreign)


def test_default_temp_dir_is_a_private_subdirectory():
    assert Settings.TMP_DIR != Path(tempfile.gettempdir())


def test_scheduler_cleanup_pass(temp_dir, monkeypatch):
    monkeypatch.setattr(cleanup_settings, "PROGRESS_TTL_SECONDS", 0)
    stale = file_manager.create_temp_path()
    stale.write_bytes(b"x")
    _age(stale, cleanup_settings.TEMP_MAX_AGE_MINUTES + 5)
    job_manager.start_progress("cleanup-job")
    job_manager.finish_progress("cleanup-job")
    time.sleep(0.01)

    summary = CleanupScheduler().run_cleanup()

    assert summary["files_deleted"] == 1
    assert summary["progress_pruned"] >= 1
    assert not stale.exists()


def test_scheduler_disabled_does_not_start(monkeypatch):
    monkeypatch.setattr(cleanup_settings, "TEMP_CLEANUP_ENABLED", False)
    scheduler = CleanupScheduler()

    scheduler.start()

    assert scheduler.scheduler.running is False
    scheduler.stop()
