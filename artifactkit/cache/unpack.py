"""
Unpack strategies built on an external 7-Zip compatible archive tool.

Two strategies are supported:

    extract()         'x' mode: unpack the whole archive into a directory.
    stream_extract()  Equivalent of `xz -dc archive | tar -x <entry>`: one tool
                      process decompresses to stdout, a second one reads the tar
                      stream from stdin and extracts a single binary. A relay
                      thread copies bytes between them.

The tool itself is opaque: only its exit code matters for control flow; its
output is kept for diagnostics.
"""

import logging
import subprocess
import threading
from pathlib import Path
from typing import BinaryIO, List, Optional

from artifactkit.core.exceptions import ExtractionError
from artifactkit.core.filesystem import make_executable

logger = logging.getLogger(__name__)

RELAY_CHUNK_SIZE = 64 * 1024


class StreamCoupling:
    """
    Copies one process's output into another process's input on a thread.

    The sink is closed as soon as the source is exhausted; the downstream
    process only sees end-of-stream through that close. If the sink breaks
    (downstream exited early), the source is still drained so the upstream
    process never blocks on a full pipe.

    Example:
        >>> coupling = StreamCoupling(producer.stdout, consumer.stdin)
        >>> coupling.start()
        >>> producer.wait(); consumer.wait(); coupling.join()
    """

    def __init__(self, source: BinaryIO, sink: BinaryIO, name: str = "stream-coupling"):
        self.source = source
        self.sink = sink
        self.bytes_copied = 0
        self.error: Optional[OSError] = None
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: Optional[float] = None) -> None:
        self._thread.join(timeout)

    def _run(self) -> None:
        try:
            while chunk := self.source.read(RELAY_CHUNK_SIZE):
                try:
                    self.sink.write(chunk)
                except OSError as e:
                    self.error = e
                    logger.debug(f"Stream sink closed early: {e}")
                    self._drain()
                    break
                self.bytes_copied += len(chunk)
        finally:
            self._close(self.sink)
            self._close(self.source)

    def _drain(self) -> None:
        while self.source.read(RELAY_CHUNK_SIZE):
            pass

    def _close(self, stream: BinaryIO) -> None:
        try:
            stream.close()
        except OSError as e:
            # Flushing into a pipe whose reader is gone
            if self.error is None:
                self.error = e


class ArchiveTool:
    """
    Wrapper around the external archive tool (7za by default).

    Example:
        >>> tool = ArchiveTool("7za")
        >>> tool.extract(Path("cache/tmp123.7z"), Path("cache/tmp123"))
    """

    def __init__(self, executable: str = "7za"):
        self.executable = executable

    def _spawn(self, args: List[str], **kwargs) -> subprocess.Popen:
        cmd = [self.executable] + args
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return subprocess.Popen(cmd, **kwargs)
        except OSError as e:
            raise ExtractionError(
                f"Cannot run archive tool '{self.executable}': {e}"
            ) from e

    def extract(self, archive_path: Path, destination: Path, cwd: Optional[Path] = None) -> str:
        """
        Extract the whole archive into destination.

        Args:
            archive_path: Archive to extract
            destination: Output directory
            cwd: Working directory of the tool process

        Returns:
            Combined stdout/stderr of the tool

        Raises:
            ExtractionError: If the tool cannot be started or exits non-zero
        """
        process = self._spawn(
            ["x", "-bd", "-y", str(archive_path), f"-o{destination}"],
            cwd=str(cwd) if cwd else None,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
        raw_output, _ = process.communicate()
        output = raw_output.decode("utf-8", errors="replace")
        logger.debug(output)

        if process.returncode != 0:
            raise ExtractionError(
                f"Extraction of {archive_path} failed with exit code "
                f"{process.returncode}:\n{output}",
                returncode=process.returncode,
                output=output,
            )
        return output

    def stream_extract(
        self,
        archive_path: Path,
        destination: Path,
        entry_pattern: str,
        binary_name: str,
    ) -> Path:
        """
        Extract one binary from a .tar.xz archive through a two-process pipeline.

        Both processes are started before any data flows. The decompressor is
        waited on first, then the extractor; either non-zero exit is fatal.

        Args:
            archive_path: .tar.xz archive
            destination: Output directory (entries are extracted flat)
            entry_pattern: Wildcard of the entry to extract (e.g. '*/bin/node')
            binary_name: Resulting file name inside destination

        Returns:
            Path to the extracted binary, made executable

        Raises:
            ExtractionError: If a process fails or the entry is missing
        """
        decompress = self._spawn(
            ["e", "-bd", "-txz", str(archive_path), "-so"],
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
        )

        try:
            extract = self._spawn(
                ["e", "-bd", "-ttar", f"-o{destination}", entry_pattern, "-r", "-si"],
                stdin=subprocess.PIPE,
                stdout=subprocess.DEVNULL,
            )
        except ExtractionError:
            decompress.kill()
            decompress.stdout.close()
            decompress.wait()
            raise

        coupling = StreamCoupling(decompress.stdout, extract.stdin)
        coupling.start()

        decompress_code = decompress.wait()
        extract_code = extract.wait()
        coupling.join()
        logger.debug(f"Relayed {coupling.bytes_copied} bytes from {archive_path}")

        if decompress_code != 0:
            raise ExtractionError(
                f"Decompression of {archive_path} failed with exit code {decompress_code}",
                returncode=decompress_code,
            )
        if extract_code != 0:
            relay = f" (relay stopped: {coupling.error})" if coupling.error else ""
            raise ExtractionError(
                f"Extraction of {entry_pattern} from {archive_path} failed "
                f"with exit code {extract_code}{relay}",
                returncode=extract_code,
            )

        binary_path = Path(destination) / binary_name
        if not binary_path.is_file():
            raise ExtractionError(
                f"Entry {entry_pattern} not found in {archive_path}"
            )

        # Permission bits are not preserved when extracting from a pipe
        make_executable(binary_path)
        return binary_path
