import json
import logging

import pytest

from pcapview import SessionOptions, ValidationError, load_options, save_options


def test_defaults_match_viewer_behaviour():
    options = SessionOptions()
    assert options.base_url == "http://localhost:8080"
    assert options.page_size == 10
    assert options.stream_page_size == 50
    assert options.request_timeout_s == 10.0
    assert options.dynamic_total_pages
    assert options.canonical_stream_keys


def test_missing_file_gives_defaults(tmp_path):
    assert load_options(tmp_path / "absent.json") == SessionOptions()


def test_save_then_load(tmp_path):
    path = save_options(
        SessionOptions(base_url="http://store:9000", page_size=25, dynamic_total_pages=False),
        tmp_path / "options.json",
    )

    loaded = load_options(path)
    assert loaded.base_url == "http://store:9000"
    assert loaded.page_size == 25
    assert not loaded.dynamic_total_pages


def test_unknown_keys_are_ignored_with_warning(tmp_path, caplog):
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"page_size": 20, "theme": "dark"}), encoding="utf-8")

    with caplog.at_level(logging.WARNING, logger="pcapview.options"):
        options = load_options(path)

    assert options.page_size == 20
    assert "theme" in caplog.text


@pytest.mark.parametrize("content", ["not json", "[1, 2]", '{"page_size": 0}', '{"page_size": "ten"}'])
def test_unusable_file_falls_back_to_defaults(tmp_path, content):
    path = tmp_path / "options.json"
    path.write_text(content, encoding="utf-8")
    assert load_options(path) == SessionOptions()


@pytest.mark.parametrize(
    "overrides",
    [
        {"page_size": 0},
        {"stream_page_size": -1},
        {"request_timeout_s": 0},
        {"base_url": ""},
        {"max_workers": True},
    ],
)
def test_validate_rejects_bad_values(overrides):
    with pytest.raises(ValidationError):
        SessionOptions(**overrides).validate()


@pytest.mark.parametrize("value", ["false", 0, None])
def test_flags_must_be_json_booleans(value):
    with pytest.raises(ValidationError):
        SessionOptions.from_dict({"dynamic_total_pages": value})


def test_string_flag_in_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "options.json"
    path.write_text(json.dumps({"stream_enabled": "false", "page_size": 20}), encoding="utf-8")

    options = load_options(path)
    assert options == SessionOptions()
    assert options.stream_enabled


def test_validate_rejects_non_boolean_flag():
    with pytest.raises(ValidationError):
        SessionOptions(canonical_stream_keys="no").validate()  # type: ignore[arg-type]
