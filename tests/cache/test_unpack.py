"""
Tests for the unpack strategies.

These run real subprocesses against the fake archive tool from
tests/fixtures/archives.py.
"""

import io
import os
import stat
from unittest.mock import Mock, patch

import pytest

from artifactkit.cache.unpack import ArchiveTool, StreamCoupling
from artifactkit.core.exceptions import ExtractionError
from tests.fixtures.archives import make_tar, make_xz

pytestmark = pytest.mark.platform_unix


class TestExtract:
    """Test direct archive extraction."""

    def test_extracts_whole_archive(self, tmp_path, fake_archive_tool):
        archive = make_tar(
            tmp_path / "tmp1.7z",
            {"bin/fpm": b"#!/bin/sh\n", "lib/app/version": b"1.9.3"},
        )
        out = tmp_path / "tmp1"
        out.mkdir()

        output = ArchiveTool(str(fake_archive_tool)).extract(archive, out, cwd=tmp_path)

        assert (out / "bin" / "fpm").read_bytes() == b"#!/bin/sh\n"
        assert (out / "lib" / "app" / "version").read_text() == "1.9.3"
        assert "Everything is Ok" in output

    def test_corrupt_archive(self, tmp_path, fake_archive_tool):
        archive = tmp_path / "tmp2.7z"
        archive.write_bytes(b"definitely not an archive")
        out = tmp_path / "tmp2"
        out.mkdir()

        with pytest.raises(ExtractionError) as exc_info:
            ArchiveTool(str(fake_archive_tool)).extract(archive, out)

        assert exc_info.value.returncode == 2
        assert "ERROR" in exc_info.value.output

    def test_missing_tool(self, tmp_path):
        with pytest.raises(ExtractionError, match="Cannot run archive tool"):
            ArchiveTool(str(tmp_path / "no-such-7za")).extract(
                tmp_path / "a.7z", tmp_path
            )


class TestStreamExtract:
    """Test the two-process streaming pipeline."""

    def _node_archive(self, tmp_path, payload):
        tar_path = make_tar(
            tmp_path / "node.tar",
            {
                "node-v18.19.0-linux-x64/README.md": b"readme",
                "node-v18.19.0-linux-x64/bin/node": payload,
                "node-v18.19.0-linux-x64/lib/node_modules/npm/package.json": b"{}",
            },
            compression="",
        )
        archive = make_xz(tmp_path / "tmp3.tar.xz", tar_path.read_bytes())
        tar_path.unlink()
        return archive

    @pytest.mark.slow
    def test_extracts_binary_larger_than_pipe_buffer(self, tmp_path, fake_archive_tool):
        """Test the pipeline terminates and preserves bytes for large payloads."""
        payload = os.urandom(4 * 1024 * 1024)
        archive = self._node_archive(tmp_path, payload)
        out = tmp_path / "tmp3"
        out.mkdir()

        binary = ArchiveTool(str(fake_archive_tool)).stream_extract(
            archive, out, "*/bin/node", "node"
        )

        assert binary == out / "node"
        assert binary.read_bytes() == payload
        assert binary.stat().st_mode & stat.S_IXUSR
        # Only the requested entry is extracted, flattened
        assert sorted(p.name for p in out.iterdir()) == ["node"]

    def test_decompression_failure(self, tmp_path, fake_archive_tool):
        """Test a corrupt .xz fails in the first stage without deadlocking."""
        archive = tmp_path / "tmp4.tar.xz"
        archive.write_bytes(b"not xz data")
        out = tmp_path / "tmp4"
        out.mkdir()

        with pytest.raises(ExtractionError, match="Decompression"):
            ArchiveTool(str(fake_archive_tool)).stream_extract(
                archive, out, "*/bin/node", "node"
            )

    def test_extraction_failure(self, tmp_path, fake_archive_tool):
        """Test a valid .xz that is not a tar fails in the second stage."""
        archive = make_xz(tmp_path / "tmp5.tar.xz", b"plain text, not a tar" * 100)
        out = tmp_path / "tmp5"
        out.mkdir()

        with pytest.raises(ExtractionError, match="Extraction of \\*/bin/node"):
            ArchiveTool(str(fake_archive_tool)).stream_extract(
                archive, out, "*/bin/node", "node"
            )

    def test_missing_entry(self, tmp_path, fake_archive_tool):
        tar_path = make_tar(tmp_path / "x.tar", {"pkg/README": b"x"}, compression="")
        archive = make_xz(tmp_path / "tmp6.tar.xz", tar_path.read_bytes())
        out = tmp_path / "tmp6"
        out.mkdir()

        with pytest.raises(ExtractionError, match="not found"):
            ArchiveTool(str(fake_archive_tool)).stream_extract(
                archive, out, "*/bin/node", "node"
            )

    def test_extraction_failure_reports_relay_error(self, tmp_path):
        """Test the relay's broken pipe is part of the failure message."""
        decompress = Mock()
        decompress.stdout = io.BytesIO(b"z" * 100_000)
        decompress.wait.return_value = 0
        extract = Mock()
        extract.stdin = _BrokenSink()
        extract.wait.return_value = 2

        with patch.object(ArchiveTool, "_spawn", side_effect=[decompress, extract]):
            with pytest.raises(ExtractionError, match="exit code 2") as exc_info:
                ArchiveTool().stream_extract(
                    tmp_path / "a.tar.xz", tmp_path, "*/bin/node", "node"
                )

        assert "relay stopped: reader gone" in str(exc_info.value)
        assert exc_info.value.returncode == 2

    def test_missing_tool(self, tmp_path):
        with pytest.raises(ExtractionError, match="Cannot run archive tool"):
            ArchiveTool(str(tmp_path / "no-such-7za")).stream_extract(
                tmp_path / "a.tar.xz", tmp_path, "*/bin/node", "node"
            )


class _BrokenSink(io.BytesIO):
    def write(self, data):
        raise BrokenPipeError("reader gone")


class TestStreamCoupling:
    """Test the byte relay."""

    def test_copies_and_closes_sink(self):
        source = io.BytesIO(b"x" * 200_000)
        sink = io.BytesIO()
        sink_close = sink.close
        copied = []

        def capture_close():
            copied.append(sink.getvalue())
            sink_close()

        sink.close = capture_close

        coupling = StreamCoupling(source, sink)
        coupling.start()
        coupling.join(timeout=10)

        assert copied == [b"x" * 200_000]
        assert sink.closed
        assert source.closed
        assert coupling.bytes_copied == 200_000
        assert coupling.error is None

    def test_broken_sink_drains_source(self):
        """Test the source is drained when the downstream reader is gone."""
        source = io.BytesIO(b"y" * 300_000)
        sink = _BrokenSink()

        coupling = StreamCoupling(source, sink)
        coupling.start()
        coupling.join(timeout=10)

        assert isinstance(coupling.error, BrokenPipeError)
        assert coupling.bytes_copied == 0
        assert source.closed
        assert sink.closed
