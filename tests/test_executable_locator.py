from tubegrab.core.config import settings
from tubegrab.core.enums import ToolName
from tubegrab.services.executable_locator import ExecutableLocator


def _touch(path):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("#!/bin/sh\n")
    return str(path)


def test_env_override_wins_when_file_exists(monkeypatch, tmp_path):
    custom = _touch(tmp_path / "custom" / "yt-dlp")
    candidate = _touch(tmp_path / "bin" / "yt-dlp")
    monkeypatch.setattr(settings, "TOOL_CANDIDATES", {ToolName.FETCHER: [candidate], ToolName.MUXER: []})
    monkeypatch.setenv("YT_DLP_PATH", custom)

    assert ExecutableLocator().locate(ToolName.FETCHER) == custom


def test_missing_env_override_falls_through_to_candidates(monkeypatch, tmp_path):
    candidate = _touch(tmp_path / "bin" / "ffmpeg")
    monkeypatch.setattr(settings, "TOOL_CANDIDATES", {ToolName.FETCHER: [], ToolName.MUXER: [candidate]})
    monkeypatch.setenv("FFMPEG_PATH", str(tmp_path / "does-not-exist" / "ffmpeg"))

    assert ExecutableLocator().locate(ToolName.MUXER) == candidate


def test_first_existing_candidate_wins(monkeypatch, tmp_path):
    missing = str(tmp_path / "nope" / "yt-dlp")
    second = _touch(tmp_path / "second" / "yt-dlp")
    third = _touch(tmp_path / "third" / "yt-dlp")
    monkeypatch.setattr(settings, "TOOL_CANDIDATES", {ToolName.FETCHER: [missing, second, third]})

    assert ExecutableLocator().locate(ToolName.FETCHER) == second


def test_falls_back_to_bare_command_name():
    locator = ExecutableLocator()

    assert locator.fetcher() == "yt-dlp"
    assert locator.muxer() == "ffmpeg"


def test_injected_environment_is_used_instead_of_process_env(monkeypatch, tmp_path):
    custom = _touch(tmp_path / "yt-dlp")
    monkeypatch.setenv("YT_DLP_PATH", str(tmp_path / "ignored"))

    locator = ExecutableLocator(environ={"YT_DLP_PATH": custom})

    assert locator.fetcher() == custom
