import json

import pytest

from tubegrab.core.exceptions import MetadataFetchException, MetadataParseException
from tubegrab.schemas import FetcherPayload
from tubegrab.services.metadata_service import (
    MetadataService,
    build_format_options,
    parse_payload,
)
from tubegrab.services.process_runner import ProcessResult

from conftest import SAMPLE_INFO, FakeRunner


URL = "https://example.com/watch?v=abc"


def _options(formats, duration=None):
    return build_format_options(FetcherPayload(formats=formats, duration=duration))


def test_fetch_metadata_end_to_end():
    runner = FakeRunner()
    metadata = MetadataService(runner=runner).fetch_metadata(URL)

    assert metadata.title == "Test"
    assert metadata.duration == 125
    assert metadata.uploader == "U"
    assert metadata.thumbnail is None
    assert [f.resolution for f in metadata.formats] == ["720p", "360p"]
    assert metadata.formats[0].format_id == "22"
    assert metadata.formats[0].filesize == 5000000
    assert metadata.formats[1].ext == "mp4"


def test_command_dumps_single_video_with_url_last():
    runner = FakeRunner()
    MetadataService(runner=runner).fetch_metadata(URL)

    command = runner.calls[0]
    assert command[0] == "yt-dlp"
    assert "--dump-json" in command
    assert "--no-playlist" in command
    assert command[-1] == URL


def test_audio_only_and_heightless_formats_are_dropped():
    options = _options([
        {"format_id": "140", "vcodec": "none", "acodec": "mp4a", "ext": "m4a"},
        {"format_id": "251", "height": None, "vcodec": "none"},
        {"format_id": "sb0", "height": 90, "vcodec": "none"},
        {"format_id": "x", "height": 480},
        {"format_id": "135", "height": 480, "vcodec": "avc1"},
    ])

    assert [(o.format_id, o.resolution) for o in options] == [("135", "480p")]


def test_duplicate_resolutions_keep_first_occurrence():
    options = _options([
        {"format_id": "136", "height": 720, "vcodec": "avc1", "ext": "mp4"},
        {"format_id": "247", "height": 720, "vcodec": "vp9", "ext": "webm"},
        {"format_id": "22", "height": 720, "vcodec": "avc1", "ext": "mp4"},
    ])

    assert len(options) == 1
    assert options[0].format_id == "136"


def test_resolutions_are_sorted_descending_as_strings():
    options = _options([
        {"format_id": "a", "height": 1080, "vcodec": "avc1"},
        {"format_id": "b", "height": 480, "vcodec": "avc1"},
        {"format_id": "c", "height": 2160, "vcodec": "vp9"},
        {"format_id": "d", "height": 720, "vcodec": "avc1"},
    ])

    labels = [o.resolution for o in options]
    assert labels == ["720p", "480p", "2160p", "1080p"]
    assert len(set(labels)) == len(labels)


def test_filesize_prefers_exact_then_approximate():
    options = _options([
        {"format_id": "a", "height": 720, "vcodec": "avc1", "filesize": 10, "filesize_approx": 20, "tbr": 1},
        {"format_id": "b", "height": 480, "vcodec": "avc1", "filesize_approx": 20, "tbr": 1},
    ], duration=100)

    assert [o.filesize for o in options] == [10, 20]


def test_filesize_is_estimated_from_bitrate_and_duration():
    options = _options([
        {"format_id": "a", "height": 720, "vcodec": "avc1", "tbr": 1234.567},
        {"format_id": "b", "height": 480, "vcodec": "avc1", "tbr": 128, "filesize": 0},
    ], duration=61)

    assert options[0].filesize == round(1234.567 * 1000 / 8 * 61)
    assert options[1].filesize == round(128 * 1000 / 8 * 61)


def test_filesize_is_unknown_without_bitrate_or_duration():
    assert _options([{"height": 720, "vcodec": "avc1", "tbr": 500}])[0].filesize is None
    assert _options([{"height": 720, "vcodec": "avc1"}], duration=60)[0].filesize is None


def test_missing_optional_fields_use_defaults():
    runner = FakeRunner()
    runner.info_result = ProcessResult(0, stdout=json.dumps({
        "id": "abc",
        "formats": [{"format_id": "18", "height": 360, "vcodec": "avc1", "fps": 29.97}],
    }))

    metadata = MetadataService(runner=runner).fetch_metadata(URL)

    assert metadata.title == "Unknown"
    assert metadata.uploader == "Unknown"
    assert metadata.duration is None
    assert metadata.formats[0].ext == "mp4"
    assert metadata.formats[0].fps == 29.97


def test_payload_without_formats_has_no_options():
    runner = FakeRunner()
    runner.info_result = ProcessResult(0, stdout=json.dumps({"title": "Live"}))

    assert MetadataService(runner=runner).fetch_metadata(URL).formats == []


def test_nonzero_exit_raises_fetch_error():
    runner = FakeRunner()
    runner.info_result = ProcessResult(1, stderr="ERROR: Unsupported URL")

    with pytest.raises(MetadataFetchException) as exc_info:
        MetadataService(runner=runner).fetch_metadata(URL)

    assert exc_info.value.status_code == 400
    assert exc_info.value.details == "ERROR: Unsupported URL"


@pytest.mark.parametrize("output", ["", "not json", "{}", "[]", "null", '{"formats": "nope"}'])
def test_unparseable_output_raises_parse_error(output):
    with pytest.raises(MetadataParseException) as exc_info:
        parse_payload(output)

    assert exc_info.value.status_code == 500


def test_parse_payload_ignores_unknown_fields():
    payload = parse_payload(json.dumps({**SAMPLE_INFO, "view_count": 10, "tags": ["a"]}))

    assert payload.title == "Test"
    assert len(payload.formats) == 2
