"""ClamAV (clamd) client using the INSTREAM command."""

import logging
import socket
import struct
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from src.core.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    clean: bool
    message: Optional[str] = None


class VirusScanner:
    """Streams files to clamd.

    Scanning only happens in production with ``CLAMAV_HOST`` set. When the
    daemon cannot be reached the file is accepted and a warning is logged.
    """

    def __init__(self, host: Optional[str], port: int = 3310, timeout: float = 30.0, chunk_size: int = 64 * 1024):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.chunk_size = chunk_size

    @classmethod
    def from_settings(cls) -> "VirusScanner":
        settings = get_settings()
        host = settings.scanner.clamav_host if settings.is_production else None
        return cls(
            host=host,
            port=settings.scanner.clamav_port,
            timeout=settings.scanner.clamav_timeout,
            chunk_size=settings.scanner.chunk_size,
        )

    @property
    def enabled(self) -> bool:
        return bool(self.host)

    def scan_file(self, path: Path) -> ScanResult:
        if not self.enabled:
            return ScanResult(clean=True)

        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout) as conn:
                conn.sendall(b"zINSTREAM\0")
                with open(path, "rb") as f:
                    while True:
                        chunk = f.read(self.chunk_size)
                        if not chunk:
                            break
                        conn.sendall(struct.pack(">I", len(chunk)) + chunk)
                # Zero-length chunk terminates the stream
                conn.sendall(struct.pack(">I", 0))

                response = b""
                while True:
                    data = conn.recv(4096)
                    if not data:
                        break
                    response += data
                    if b"\0" in data:
                        break
        except socket.timeout:
            logger.warning(f"ClamAV scan timed out for {path.name}, accepting file")
            return ScanResult(clean=True, message="Scan timeout")
        except OSError as e:
            logger.warning(f"ClamAV unavailable ({e}), accepting {path.name}")
            return ScanResult(clean=True, message="Scan unavailable")

        return self.parse_response(response.decode("utf-8", errors="replace"))

    @staticmethod
    def parse_response(response: str) -> ScanResult:
        """clamd answers ``stream: OK`` or ``stream: <signature> FOUND``."""
        text = response.strip("\0").strip()
        clean = "OK" in text and "FOUND" not in text
        return ScanResult(clean=clean, message=None if clean else text)
