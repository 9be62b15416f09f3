"""SML transport protocol v1 framing.

A frame looks like::

    1b1b1b1b 01010101 <payload, escaped> [00 padding] 1b1b1b1b 1a NN C1 C2

``NN`` is the number of padding bytes, ``C1 C2`` the CRC over everything
from the start sequence up to and including ``NN``. The payload is
processed in 4 byte words; a payload word equal to the escape sequence is
sent twice.
"""

import logging
from typing import Iterator, Tuple, Union

from tibber_exporter.exceptions import DecodeError
from tibber_exporter.sml.crc import crc16_x25

logger = logging.getLogger(__name__)

ESCAPE = b"\x1b\x1b\x1b\x1b"
BEGIN = b"\x01\x01\x01\x01"
START = ESCAPE + BEGIN
END_MARKER = 0x1A
MAX_PADDING = 3


def decode(data: bytes) -> Iterator[Union[bytes, DecodeError]]:
    """Lazily yield the payload of every frame found in ``data``.

    A frame that cannot be decoded is yielded as a ``DecodeError`` instance
    and ends the sequence, since the following frame boundaries can no
    longer be trusted. Bytes outside of frames are skipped.
    """
    pos = 0
    while True:
        start = data.find(START, pos)
        if start < 0:
            if pos < len(data):
                logger.debug(f"Ignoring {len(data) - pos} trailing bytes without start sequence")
            return
        if start > pos:
            logger.debug(f"Skipping {start - pos} bytes before start sequence")

        try:
            payload, pos = _decode_frame(data, start)
        except DecodeError as e:
            yield e
            return

        yield payload


def _read_word(data: bytes, pos: int) -> bytes:
    if pos + 4 > len(data):
        raise DecodeError("Unexpected end of data inside SML frame")
    return data[pos : pos + 4]


def _decode_frame(data: bytes, start: int) -> Tuple[bytes, int]:
    pos = start + len(START)
    payload = bytearray()

    while True:
        word = _read_word(data, pos)
        pos += 4
        if word != ESCAPE:
            payload += word
            continue

        word = _read_word(data, pos)
        pos += 4
        if word == ESCAPE:
            payload += ESCAPE
        elif word == BEGIN:
            # A new frame starts before the current one was terminated
            logger.debug(f"Discarding {len(payload)} bytes of unterminated frame")
            start = pos - len(START)
            payload.clear()
        elif word[0] == END_MARKER:
            _check_crc(data[start : pos - 2], word[2:4])
            return _strip_padding(payload, word[1]), pos
        else:
            raise DecodeError(f"Invalid escape sequence: {word.hex()}")


def _check_crc(covered: bytes, received_bytes: bytes) -> None:
    expected = crc16_x25(covered)
    received = int.from_bytes(received_bytes, "big")
    # Some meters send the checksum little endian
    swapped = int.from_bytes(received_bytes, "little")
    if expected not in (received, swapped):
        raise DecodeError(f"CRC mismatch: calculated {expected:#06x}, frame has {received:#06x}")


def _strip_padding(payload: bytearray, num_padding: int) -> bytes:
    if num_padding > MAX_PADDING or num_padding > len(payload):
        raise DecodeError(f"Invalid number of padding bytes: {num_padding}")
    end = len(payload) - num_padding
    if any(payload[end:]):
        raise DecodeError("Padding bytes are not zero")
    return bytes(payload[:end])
