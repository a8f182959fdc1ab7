import json
import logging
import sys

from torrentmeta.common.logging import (
    LOG_RECORD_BUILTIN_ATTRS,
    JSONLogFormatter,
    config_logging,
    stop_listener,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="torrentmeta.bencode.decoder",
        level=logging.DEBUG,
        pathname=__file__,
        lineno=12,
        msg="Rejected bencoded input: %s",
        args=("malformed integer",),
        exc_info=None,
    )
    for key, val in extra.items():
        setattr(record, key, val)
    return record


def test_json_formatter_maps_keys():
    formatter = JSONLogFormatter(fmt_keys={"level": "levelname", "logger": "name", "line": "lineno"})
    payload = json.loads(formatter.format(_record()))

    assert payload["level"] == "DEBUG"
    assert payload["logger"] == "torrentmeta.bencode.decoder"
    assert payload["line"] == 12
    assert payload["message"] == "Rejected bencoded input: malformed integer"
    assert "timestamp" in payload


def test_json_formatter_includes_extra_fields():
    payload = json.loads(JSONLogFormatter().format(_record(position=7)))
    assert payload["position"] == 7


def test_json_formatter_includes_exception():
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()
    payload = json.loads(JSONLogFormatter().format(record))
    assert "ValueError: boom" in payload["exc_info"]


def test_config_logging_writes_json_lines(tmp_path, restore_logging):
    listener = config_logging("test.log.jsonl", log_dir=tmp_path)
    assert listener is not None

    logging.getLogger("torrentmeta.test").debug("decoded", extra={"position": 3})
    stop_listener(listener)

    lines = (tmp_path / "test.log.jsonl").read_text().splitlines()
    entries = [json.loads(line) for line in lines]
    assert any(e["message"] == "decoded" and e["position"] == 3 for e in entries)


def test_stop_listener_is_idempotent(tmp_path, restore_logging):
    listener = config_logging("twice.log.jsonl", log_dir=tmp_path)
    stop_listener(listener)
    stop_listener(listener)
    assert listener._thread is None


def test_builtin_attrs_are_not_emitted_as_extras():
    assert {"msg", "args", "levelno", "taskName"} <= LOG_RECORD_BUILTIN_ATTRS
    payload = json.loads(JSONLogFormatter().format(_record()))
    assert set(payload) == {"message", "timestamp"}
