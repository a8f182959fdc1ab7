import pytest

from main import build_parser, main


@pytest.fixture
def workdir(tmp_path, monkeypatch, restore_logging):
    # config_logging writes under ./data/logs
    monkeypatch.chdir(tmp_path)
    return tmp_path


def test_prints_summary(workdir, multi_file_dict, encode, capsys):
    path = workdir / "album.torrent"
    path.write_bytes(encode(multi_file_dict))

    assert main([str(path)]) == 0

    out = capsys.readouterr().out
    assert "Torrent: album" in out
    assert "Tracker: http://tier2.example.org/announce" in out
    assert "disc1/01.flac (100 bytes)" in out
    assert "Private: yes" in out
    assert (workdir / "data" / "logs" / "torrentmeta.log.jsonl").exists()


def test_missing_file(workdir, capsys):
    assert main([str(workdir / "nope.torrent")]) == 1
    assert "not found" in capsys.readouterr().out


def test_invalid_file(workdir, capsys):
    path = workdir / "broken.torrent"
    path.write_bytes(b"d8:announce3:urle")
    assert main([str(path)]) == 1
    assert "Invalid torrent file" in capsys.readouterr().out


def test_lenient_accepts_trailing_bytes(workdir, single_file_dict, encode, capsys):
    path = workdir / "trailing.torrent"
    path.write_bytes(encode(single_file_dict) + b"\n")

    assert main([str(path)]) == 1
    assert main([str(path), "--lenient"]) == 0
    assert "Torrent: ubuntu.iso" in capsys.readouterr().out


def test_parser_defaults():
    args = build_parser().parse_args(["x.torrent"])
    assert args.strip_whitespace is False
    assert args.lenient is False
    assert args.reject_duplicate_keys is False
    assert args.max_depth == 256


def test_unreadable_path(workdir, capsys):
    directory = workdir / "folder.torrent"
    directory.mkdir()
    assert main([str(directory)]) == 1
    assert "Cannot read torrent file" in capsys.readouterr().out


def test_negative_max_depth_is_a_usage_error(workdir, single_file_dict, encode, capsys):
    path = workdir / "single.torrent"
    path.write_bytes(encode(single_file_dict))
    with pytest.raises(SystemExit) as excinfo:
        main([str(path), "--max-depth", "-1"])
    assert excinfo.value.code == 2
    assert "must not be negative" in capsys.readouterr().err
