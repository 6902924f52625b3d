"""Output sinks for generated receipts.

A sink is where a finished receipt goes: ``persist`` stores bytes under
a filename, ``present`` sends thermal text to a printer and ``share``
hands a document to a sharing channel. Every temporary handle a sink
opens (temp files, serial ports, bot sessions) is released before the
call returns, whatever the outcome.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import serial
from telegram import Bot
from telegram.error import TelegramError

from moloja.printing.errors import ShareUnavailableError

logger = logging.getLogger(__name__)


class OutputSink(ABC):
    """Platform adapter for receipt output."""

    @abstractmethod
    def persist(self, data: bytes, filename: str) -> Path:
        """Store a generated file.

        Returns:
            Where the file was written
        """
        ...

    @abstractmethod
    async def present(self, text: str) -> bool:
        """Print thermal receipt text.

        Returns:
            True if the printer accepted the job
        """
        ...

    @abstractmethod
    async def share(self, data: bytes, filename: str, caption: str) -> bool:
        """Share a document as a file attachment.

        Returns:
            True if shared, False if the recipient declined

        Raises:
            ShareUnavailableError: If there is no sharing channel or it
                rejected the document
        """
        ...


class FileSink(OutputSink):
    """Local filesystem sink.

    Files are written through a temporary file in the output directory
    and renamed into place. Printing goes through the system spooler
    (``lp``) using a temporary spool file.
    """

    def __init__(self, output_dir: Path, printer_name: Optional[str] = None):
        self.output_dir = Path(output_dir)
        self.printer_name = printer_name

    def persist(self, data: bytes, filename: str) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        target = self.output_dir / filename
        fd, tmp_name = tempfile.mkstemp(prefix=".receipt-", dir=self.output_dir)
        try:
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(data)
            os.replace(tmp_name, target)
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
        logger.info(f"Saved {target} ({len(data)} bytes)")
        return target

    async def present(self, text: str) -> bool:
        fd, spool_name = tempfile.mkstemp(prefix="receipt-", suffix=".txt")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as spool:
                spool.write(text)

            args = ["lp"]
            if self.printer_name:
                args += ["-d", self.printer_name]
            args.append(spool_name)

            try:
                proc = await asyncio.create_subprocess_exec(
                    *args,
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
            except FileNotFoundError:
                logger.error("Print spooler (lp) not available")
                return False

            _, stderr = await proc.communicate()
            if proc.returncode != 0:
                logger.error(f"Print spooler rejected receipt: {stderr.decode(errors='replace').strip()}")
                return False

            logger.info("Receipt sent to print spooler")
            return True
        finally:
            os.unlink(spool_name)

    async def share(self, data: bytes, filename: str, caption: str) -> bool:
        raise ShareUnavailableError("No sharing channel configured")


class DelegatingSink(OutputSink):
    """Sink that forwards every operation to a base sink."""

    def __init__(self, base: OutputSink):
        self.base = base

    def persist(self, data: bytes, filename: str) -> Path:
        return self.base.persist(data, filename)

    async def present(self, text: str) -> bool:
        return await self.base.present(text)

    async def share(self, data: bytes, filename: str, caption: str) -> bool:
        return await self.base.share(data, filename, caption)


class SerialPrinterSink(DelegatingSink):
    """ESC/POS thermal printer on a serial port (58mm, PC860 code page).

    The port is opened for each job and closed when the job ends.
    """

    DEFAULT_BAUD = 9600
    DEFAULT_PORT = "/dev/serial0"
    CHUNK_SIZE = 256

    # ESC/POS command constants
    ESC = b'\x1b'
    GS = b'\x1d'
    CMD_INIT = ESC + b'@'
    CMD_CODEPAGE_PC860 = ESC + b't\x03'  # Portuguese
    CMD_PARTIAL_CUT = GS + b'V\x01'

    def __init__(
        self,
        base: OutputSink,
        port: str = DEFAULT_PORT,
        baudrate: int = DEFAULT_BAUD,
        feed_lines: int = 3,
    ):
        super().__init__(base)
        self._port = port
        self._baudrate = baudrate
        self._feed_lines = feed_lines

    def encode(self, text: str) -> bytes:
        """Frame receipt text as ESC/POS commands."""
        body = text.replace("\r\n", "\n").encode("cp860", errors="replace")
        feed = self.ESC + b'd' + bytes([self._feed_lines])
        return self.CMD_INIT + self.CMD_CODEPAGE_PC860 + body + feed + self.CMD_PARTIAL_CUT

    async def present(self, text: str) -> bool:
        data = self.encode(text)
        port = None
        try:
            port = serial.Serial(
                port=self._port,
                baudrate=self._baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=2.0,
            )
            # Send in chunks to avoid overflowing the printer buffer
            for i in range(0, len(data), self.CHUNK_SIZE):
                port.write(data[i:i + self.CHUNK_SIZE])
                port.flush()
                await asyncio.sleep(0.01)
            logger.info(f"Receipt printed on {self._port} ({len(data)} bytes)")
            return True
        except serial.SerialException as e:
            logger.error(f"Thermal printer on {self._port} failed: {e}")
            return False
        finally:
            if port is not None:
                port.close()


class TelegramShareSink(DelegatingSink):
    """Shares documents to a Telegram chat through a bot."""

    def __init__(self, base: OutputSink, token: str, chat_id: str):
        super().__init__(base)
        self._token = token
        self._chat_id = chat_id

    async def share(self, data: bytes, filename: str, caption: str) -> bool:
        bot = Bot(self._token)
        try:
            async with bot:
                await bot.send_document(
                    chat_id=self._chat_id,
                    document=data,
                    filename=filename,
                    caption=caption,
                )
        except TelegramError as e:
            logger.error(f"Telegram share failed: {e}")
            raise ShareUnavailableError(f"Telegram share failed: {e}") from e
        logger.info(f"Shared {filename} to Telegram chat {self._chat_id}")
        return True


def create_sink(settings) -> OutputSink:
    """Build the sink chain described by application settings.

    Args:
        settings: moloja.settings.Settings

    Returns:
        Configured OutputSink
    """
    sink: OutputSink = FileSink(settings.output_dir, settings.printer.name)
    if settings.printer.backend == "serial":
        sink = SerialPrinterSink(sink, settings.printer.port, settings.printer.baudrate)
    if settings.can_share:
        sink = TelegramShareSink(sink, settings.share.telegram_bot_token, settings.share.telegram_chat_id)
    return sink
