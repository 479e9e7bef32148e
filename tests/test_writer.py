import uuid

import pytest

from zaplog.sink import register_sink
from zaplog.writer import combine_write_syncers, open_paths


class RecordingWriter:
    def __init__(self, fail=False):
        self.writes = []
        self.synced = 0
        self.fail = fail

    def write(self, data):
        if self.fail:
            raise OSError("failed")
        self.writes.append(bytes(data))
        return len(data)

    def sync(self):
        self.synced += 1


def test_open_no_paths():
    writer, close = open_paths()
    assert writer.write(b"abc") == 3
    assert writer == combine_write_syncers()
    close()


@pytest.mark.parametrize("kind", ["stdout", "stderr", "path", "file", "localhost"])
def test_open(tmp_path, kind):
    temp = tmp_path / "test.log"
    assert not temp.exists()
    path = {
        "stdout": "stdout",
        "stderr": "stderr",
        "path": str(temp),
        "file": "file://" + temp.as_posix(),
        "localhost": "file://localhost" + temp.as_posix(),
    }[kind]
    writer, close = open_paths(path)
    assert writer.write(b"x") == 1
    close()
    is_file = kind not in ("stdout", "stderr")
    assert temp.exists() == is_file
    if is_file:
        assert temp.read_bytes() == b"x"


def test_open_stdout_writes(capsys):
    writer, close = open_paths("stdout")
    assert writer.write(b"hi\n") == 3
    writer.sync()
    close()
    assert capsys.readouterr().out == "hi\n"


def test_open_missing_path(tmp_path):
    missing = tmp_path / "foo" / "bar" / "baz"
    with pytest.raises(ExceptionGroup) as info:
        open_paths(str(missing))
    errors = info.value.exceptions
    assert len(errors) == 1
    assert isinstance(errors[0], FileNotFoundError)
    assert str(missing) in str(errors[0])
    assert errors[0].__notes__ == [f'open sink "{missing}"']


def test_open_missing_file_url_with_localhost(tmp_path):
    missing = tmp_path / "foo" / "bar" / "baz"
    with pytest.raises(ExceptionGroup) as info:
        open_paths("file://localhost" + missing.as_posix())
    errors = info.value.exceptions
    assert len(errors) == 1
    assert isinstance(errors[0], FileNotFoundError)
    assert missing.as_posix() in str(errors[0])


def test_open_multiple_paths_collects_every_failure(tmp_path):
    temp = tmp_path / "test.log"
    missing_a = tmp_path / "foo" / "bar" / "baz"
    missing_b = tmp_path / "baz" / "quux"
    with pytest.raises(ExceptionGroup) as info:
        open_paths("stdout", str(missing_a), str(temp), "file://" + missing_b.as_posix())
    errors = info.value.exceptions
    assert len(errors) == 2
    assert all(isinstance(err, FileNotFoundError) for err in errors)
    assert str(missing_a) in str(errors[0])
    assert missing_b.as_posix() in str(errors[1])
    assert temp.exists()


def test_open_relative_path(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    name = "test-relative-path.txt"
    assert not (tmp_path / name).exists()
    writer, close = open_paths(name)
    assert writer.write(b"test") == 4
    close()
    assert (tmp_path / name).read_bytes() == b"test"


@pytest.mark.parametrize(
    "paths",
    [
        ["./non-existent-dir/file"],
        ["stdout", "./non-existent-dir/file"],
        ["://foo.log"],
        ["mem://somewhere"],
    ],
)
def test_open_fails(tmp_path, monkeypatch, paths):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ExceptionGroup) as info:
        open_paths(*paths)
    assert len(info.value.exceptions) == 1


@pytest.mark.parametrize(
    "prefix, message",
    [
        ("file://host01.example.com", "empty or use localhost"),
        ("file://user@localhost", "user and password not allowed"),
        ("file://localhost:8080", "ports not allowed"),
    ],
)
def test_open_other_errors(tmp_path, prefix, message):
    temp = (tmp_path / "test.log").as_posix()
    with pytest.raises(ExceptionGroup) as info:
        open_paths(prefix + temp)
    (error,) = info.value.exceptions
    assert isinstance(error, ValueError)
    assert message in str(error)


@pytest.mark.parametrize(
    "suffix, message",
    [("#foo", "fragments not allowed"), ("?foo=bar", "query parameters not allowed")],
)
def test_open_url_extras_rejected(tmp_path, suffix, message):
    temp = (tmp_path / "test.log").as_posix()
    with pytest.raises(ExceptionGroup) as info:
        open_paths("file://localhost" + temp + suffix)
    (error,) = info.value.exceptions
    assert message in str(error)


def test_open_with_erroring_sink_factory():
    scheme = f"test{uuid.uuid4().hex}"

    def factory(url):
        raise RuntimeError("expected factory error")

    register_sink(scheme, factory)
    with pytest.raises(ExceptionGroup) as info:
        open_paths(scheme + "://some/path")
    (error,) = info.value.exceptions
    assert str(error) == "expected factory error"


def test_combine_write_syncers():
    first, second = RecordingWriter(), RecordingWriter()
    combined = combine_write_syncers(first, second)
    assert combined.write(b"test") == 4
    combined.sync()
    assert first.writes == [b"test"]
    assert second.writes == [b"test"]
    assert (first.synced, second.synced) == (1, 1)


def test_combine_write_syncers_reports_failures_but_writes_others():
    good, bad = RecordingWriter(), RecordingWriter(fail=True)
    combined = combine_write_syncers(bad, good)
    with pytest.raises(ExceptionGroup) as info:
        combined.write(b"data")
    assert [str(e) for e in info.value.exceptions] == ["failed"]
    assert good.writes == [b"data"]