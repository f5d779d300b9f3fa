"""Tests for stream resolution."""

import io
import sys

import pytest

from slshooks.config import RunOptionsConfig
from slshooks.core.streams import ResolvedStreams, StreamResolver


def resolve(**options) -> ResolvedStreams:
    return StreamResolver(RunOptionsConfig.model_validate(options)).resolve()


class TestStreamResolver:
    def test_defaults(self):
        streams = resolve()
        assert streams.stdin is None
        assert streams.stdout is sys.stdout
        assert streams.stderr is sys.stderr
        assert streams.used_standard_streams == {"stdout", "stderr"}
        assert streams.opened == []

    def test_suppressed_stream_is_none(self):
        streams = resolve(stderr=False)
        assert streams.stderr is None
        assert "stderr" not in streams.used_standard_streams

    def test_inherited_stdin(self):
        streams = resolve(stdin=True)
        assert streams.stdin is sys.stdin
        assert "stdin" in streams.used_standard_streams

    def test_output_file_gets_exact_bytes(self, tmp_path):
        out = tmp_path / "out.log"
        streams = resolve(stdout=str(out))
        assert streams.stdout.writable()
        streams.stdout.write(b"hello\x00world")
        streams.close()
        assert out.read_bytes() == b"hello\x00world"

    def test_output_file_truncates(self, tmp_path):
        out = tmp_path / "out.log"
        out.write_bytes(b"old contents")
        streams = resolve(stdout=str(out))
        streams.close()
        assert out.read_bytes() == b""

    def test_output_file_append_flag(self, tmp_path):
        out = tmp_path / "out.log"
        out.write_bytes(b"old ")
        streams = resolve(stdout={"name": str(out), "flags": "a"})
        streams.stdout.write(b"new")
        streams.close()
        assert out.read_bytes() == b"old new"

    def test_output_file_append_update_flag(self, tmp_path):
        out = tmp_path / "out.log"
        out.write_bytes(b"old ")
        streams = resolve(stdout={"name": str(out), "flags": "a+"})
        streams.stdout.write(b"new")
        streams.close()
        assert out.read_bytes() == b"old new"

    def test_input_file_opened_for_reading(self, tmp_path):
        source = tmp_path / "in.txt"
        source.write_bytes(b"payload")
        streams = resolve(stdin=str(source))
        assert streams.stdin.read() == b"payload"
        streams.close()

    def test_relative_path_under_base_dir(self, tmp_path):
        options = RunOptionsConfig.model_validate({"stdout": "logs.txt"})
        streams = StreamResolver(options, base_dir=tmp_path).resolve()
        streams.stdout.write(b"x")
        streams.close()
        assert (tmp_path / "logs.txt").read_bytes() == b"x"

    def test_unopenable_file_raises(self, tmp_path):
        with pytest.raises(OSError):
            resolve(stdout=str(tmp_path / "missing" / "out.log"))

    def test_failure_closes_already_opened(self, tmp_path, monkeypatch):
        opened = []
        real_open = StreamResolver.open_file

        def tracking_open(config, writable):
            handle = real_open(config, writable)
            opened.append(handle)
            return handle

        monkeypatch.setattr(StreamResolver, "open_file", staticmethod(tracking_open))
        with pytest.raises(OSError):
            resolve(stdout=str(tmp_path / "out.log"), stderr=str(tmp_path / "nope" / "err.log"))
        assert len(opened) == 1
        assert opened[0].closed

    def test_close_is_idempotent(self, tmp_path):
        streams = resolve(stdout=str(tmp_path / "out.log"))
        handle = streams.stdout
        streams.close()
        streams.close()
        assert handle.closed


class TestPrepareForSharing:
    def test_switches_text_streams_to_line_buffering(self):
        buffer = io.BytesIO()
        stream = io.TextIOWrapper(buffer, encoding="utf-8")
        stream.write("pending")
        streams = ResolvedStreams(stdout=stream, used_standard_streams={"stdout"})

        streams.prepare_for_sharing()

        assert stream.line_buffering is True
        assert buffer.getvalue() == b"pending"

    def test_ignores_streams_not_inherited(self, tmp_path):
        handle = open(tmp_path / "out.log", "wb")
        streams = ResolvedStreams(stdout=handle, opened=[handle])
        streams.prepare_for_sharing()
        streams.close()

    def test_streams_without_reconfigure(self):
        class Sink:
            flushed = False

            def flush(self):
                self.flushed = True

        sink = Sink()
        streams = ResolvedStreams(stderr=sink, used_standard_streams={"stderr"})
        streams.prepare_for_sharing()
        assert sink.flushed

    def test_skips_missing_host_stream(self, monkeypatch):
        monkeypatch.setattr(sys, "stdout", None)
        streams = resolve(stdout=True, stderr=False)
        assert streams.stdout is None
        assert streams.used_standard_streams == {"stdout"}
        streams.prepare_for_sharing()
