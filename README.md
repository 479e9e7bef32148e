# zaplog

Building blocks for leveled, structured logging.

zaplog provides the pieces that sit around a structured logger:

- **Levels** (`zaplog.level`): the `Level` enumeration (`debug`, `info`,
  `warn`, `error`, `dpanic`, `panic`, `fatal`) with `Level.from_text`, which
  accepts lowercase or all-caps names and treats empty text as `info`;
  `LevelEnablerFunc` for wrapping a plain predicate; and `AtomicLevel`, a
  thread-safe level whose `level` property can be changed while a program
  runs, with `unmarshal_text` and `marshal_text` for its text form.
  `parse_atomic_level` builds one from text. Unknown names raise
  `UnrecognizedLevelError`.
- **A level endpoint** (`zaplog.http_handler`): `LevelHandler` is a WSGI
  application that reports the current level on `GET` and changes it on
  `PUT`. A `PUT` with content type `application/x-www-form-urlencoded` reads
  `level=debug` from the body, falling back to the query string; any other
  content type is read as a JSON body such as `{"level":"debug"}`.
  `handle_level_request` does the same work without a web server and returns
  the status and the payload.
- **Sinks and writers** (`zaplog.sink`, `zaplog.writer`): `open_paths`
  opens log destinations given as plain paths, `file://` URLs (host empty or
  `localhost`, no user, port, query or fragment), or the special names
  `stdout` and `stderr`, and combines them into one locked writer. It returns
  the writer and a function that closes what was opened; if any destination
  fails, the rest are closed and an `ExceptionGroup` of the failures is
  raised. `register_sink` adds a factory for a custom URL scheme to the
  registry returned by `default_registry`; `SinkRegistry` can also be used on
  its own. `combine_write_syncers` merges several writers into one, or
  returns a discarding writer when given none.
- **Stack traces** (`zaplog.stacktrace`): `take_stacktrace` returns the
  current call stack as text, a function line followed by a tab-indented
  `file:line` line per frame. `capture_stacktrace` returns the `Frame`
  objects, and `format_stack` renders them.
- **Small utilities**: `Color` (`zaplog.color`) for ANSI-coloured terminal
  text, `time_to_millis` (`zaplog.timeutil`) for epoch milliseconds, `Pool`
  (`zaplog.pool`) for reusing objects, and `exit_with`, `stub` and
  `with_stub` (`zaplog.exit`) for code that ends the process and must still
  be testable.
- **Test helpers** (`zaplog.ztest`): `MockClock`, which starts at the Unix
  epoch and moves only through `add`, with tickers that put each tick on a
  queue; `timeout` and `sleep`, scaled by `TEST_TIMEOUT_SCALE` or by
  `initialize`; and writer doubles (`Buffer`, `Discarder`, `FailWriter`,
  `ShortWriter`) that record whether they were synced.

## Dynamic levels

```python
from zaplog.level import Level, parse_atomic_level

level = parse_atomic_level("info")
level.enabled(Level.from_text("debug"))   # False
level.unmarshal_text("debug")
str(level)                                # "debug"
level.level = Level.WARN
level.marshal_text()                      # b"warn"
```

## Changing the level over HTTP

```python
from wsgiref.simple_server import make_server

from zaplog.http_handler import LevelHandler
from zaplog.level import parse_atomic_level

level = parse_atomic_level("info")
make_server("localhost", 8080, LevelHandler(level)).serve_forever()
```

A `PUT` with `{"level":"warn"}` then raises the threshold for everything
sharing `level`; malformed or unknown levels get a `400` response with an
`error` field, and methods other than `GET` and `PUT` get `405`.

## Opening destinations

```python
from zaplog.writer import open_paths

writer, close = open_paths("stderr", "/tmp/app.log")
writer.write(b"hello\n")
writer.sync()
close()
```

## Benchmark tables

The `zaplog-readme` command reads a template on standard input, runs the
benchmarks named `BenchmarkAddingFields`, `BenchmarkAccumulatedContext` and
`BenchmarkWithoutFields` with `go test -bench=<name> -benchmem` in a
`benchmarks` directory under the current directory, and writes the template
to standard output with `{{.BenchmarkAddingFields}}`,
`{{.BenchmarkAccumulatedContext}}` and `{{.BenchmarkWithoutFields}}` replaced
by Markdown tables of the results:

```
zaplog-readme < readme.tmpl > README.md
```

The template language understands only `{{.Name}}` fields, `{{/* ... */}}`
comments and `{{-` / `-}}` whitespace trimming. The command needs the `go`
tool and the benchmark directory to be present; zaplog supplies neither.

## What zaplog does not do

zaplog has no logger of its own: there are no logger objects, no log
methods, no encoders (JSON or console) and no configuration presets. The
modules here are the supporting pieces such a logger would use: levels,
destinations, stack traces and test doubles.