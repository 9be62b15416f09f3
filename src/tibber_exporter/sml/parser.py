"""Parser for the SML message structure carried inside a transport frame.

Every element starts with a type-length (TL) field::

    bit 7     another TL byte follows
    bit 6..4  type (000 octet string, 100 boolean, 101 signed,
              110 unsigned, 111 list)
    bit 3..0  length nibble

For lists the length is the number of elements, for everything else it
is the number of bytes including the TL field itself.
"""

import logging
from typing import Callable, Optional, TypeVar

from tibber_exporter.domain.sml import (
    BoolValue,
    BytesValue,
    CloseResponse,
    GetListResponse,
    IntegerValue,
    ListEntry,
    ListValue,
    Message,
    OpenResponse,
    SmlTime,
    SmlValue,
    UnknownBody,
)
from tibber_exporter.exceptions import ParseError

logger = logging.getLogger(__name__)

T = TypeVar("T")

TYPE_OCTET_STRING = 0b000
TYPE_BOOLEAN = 0b100
TYPE_SIGNED = 0b101
TYPE_UNSIGNED = 0b110
TYPE_LIST = 0b111

MAX_DEPTH = 32

OPTIONAL_ABSENT = 0x01
END_OF_MESSAGE = 0x00

OPEN_RESPONSE = 0x0101
CLOSE_RESPONSE = 0x0201
GET_LIST_RESPONSE = 0x0701

TIME_KINDS = {1: "sec_index", 2: "timestamp", 3: "local_timestamp"}


def parse(frame: bytes) -> list[Message]:
    """Parse all messages of a decoded frame."""
    reader = SmlReader(frame)
    messages = []
    while not reader.at_end():
        # Zero bytes between messages are filler some meters add
        if reader.peek() == END_OF_MESSAGE:
            reader.skip()
            continue
        messages.append(reader.read_message())
    logger.debug(f"Parsed {len(messages)} SML messages from {len(frame)} bytes")
    return messages


def _integer_bits(size: int) -> int:
    for bits in (8, 16, 32, 64):
        if size * 8 <= bits:
            return bits
    raise ParseError(f"Integer of {size} bytes is too wide")


class SmlReader:
    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    # Raw access

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def peek(self) -> int:
        if self.at_end():
            raise ParseError("Unexpected end of SML data")
        return self.data[self.pos]

    def skip(self) -> None:
        self.pos += 1

    def _next_byte(self) -> int:
        byte = self.peek()
        self.pos += 1
        return byte

    def _take(self, size: int) -> bytes:
        if self.pos + size > len(self.data):
            raise ParseError(f"Unexpected end of SML data at offset {self.pos} (need {size} bytes)")
        chunk = self.data[self.pos : self.pos + size]
        self.pos += size
        return chunk

    def _read_tl(self) -> tuple[int, int, int]:
        """Return (type, length, number of TL bytes)."""
        first = self._next_byte()
        tl_type = (first >> 4) & 0x07
        length = first & 0x0F
        tl_bytes = 1
        more = first & 0x80
        while more:
            byte = self._next_byte()
            if byte & 0x70:
                raise ParseError(f"Invalid TL continuation byte {byte:#04x} at offset {self.pos - 1}")
            length = (length << 4) | (byte & 0x0F)
            more = byte & 0x80
            tl_bytes += 1
        return tl_type, length, tl_bytes

    # Generic values

    def read_value(self, depth: int = 0) -> SmlValue:
        offset = self.pos
        tl_type, length, tl_bytes = self._read_tl()

        if tl_type == TYPE_LIST:
            if depth >= MAX_DEPTH:
                raise ParseError(f"SML lists nested deeper than {MAX_DEPTH} at offset {offset}")
            return ListValue(value=[self.read_value(depth + 1) for _ in range(length)])

        size = length - tl_bytes
        if size < 0:
            raise ParseError(f"Invalid length {length} at offset {offset}")

        if tl_type == TYPE_OCTET_STRING:
            return BytesValue(value=self._take(size))

        if tl_type == TYPE_BOOLEAN:
            if size != 1:
                raise ParseError(f"Boolean with {size} bytes at offset {offset}")
            return BoolValue(value=self._take(1)[0] != 0)

        if tl_type in (TYPE_SIGNED, TYPE_UNSIGNED):
            if size == 0:
                raise ParseError(f"Empty integer at offset {offset}")
            signed = tl_type == TYPE_SIGNED
            bits = _integer_bits(size)
            value = int.from_bytes(self._take(size), "big", signed=signed)
            return IntegerValue(signed=signed, bits=bits, value=value)

        raise ParseError(f"Unknown SML type {tl_type:#05b} at offset {offset}")

    def _optional(self, read: Callable[[], T]) -> Optional[T]:
        if self.peek() == OPTIONAL_ABSENT:
            self.skip()
            return None
        return read()

    def _expect_list(self, size: int, what: str) -> None:
        offset = self.pos
        tl_type, length, _ = self._read_tl()
        if tl_type != TYPE_LIST:
            raise ParseError(f"Expected {what} list at offset {offset}")
        if length != size:
            raise ParseError(f"Expected {size} elements in {what} at offset {offset}, got {length}")

    def read_octets(self) -> bytes:
        offset = self.pos
        value = self.read_value()
        if not isinstance(value, BytesValue):
            raise ParseError(f"Expected octet string at offset {offset}")
        return value.value

    def read_int(self) -> int:
        offset = self.pos
        value = self.read_value()
        if not isinstance(value, IntegerValue):
            raise ParseError(f"Expected integer at offset {offset}")
        return value.value

    # Structures

    def read_time(self) -> SmlTime:
        self._expect_list(2, "SML time")
        offset = self.pos
        choice = self.read_int()
        kind = TIME_KINDS.get(choice)
        if kind is None:
            raise ParseError(f"Unknown SML time choice {choice} at offset {offset}")
        if kind != "local_timestamp":
            return SmlTime(kind=kind, value=self.read_int())

        self._expect_list(3, "local timestamp")
        return SmlTime(
            kind=kind,
            value=self.read_int(),
            local_offset=self.read_int(),
            season_offset=self.read_int(),
        )

    def read_list_entry(self) -> ListEntry:
        self._expect_list(7, "list entry")
        return ListEntry(
            obj_name=self.read_octets(),
            status=self._optional(self.read_int),
            val_time=self._optional(self.read_time),
            unit=self._optional(self.read_int),
            scaler=self._optional(self.read_int),
            value=self.read_value(),
            value_signature=self._optional(self.read_octets),
        )

    def read_open_response(self) -> OpenResponse:
        self._expect_list(6, "open response")
        return OpenResponse(
            codepage=self._optional(self.read_octets),
            client_id=self._optional(self.read_octets),
            req_file_id=self.read_octets(),
            server_id=self.read_octets(),
            ref_time=self._optional(self.read_time),
            sml_version=self._optional(self.read_int),
        )

    def read_close_response(self) -> CloseResponse:
        self._expect_list(1, "close response")
        return CloseResponse(global_signature=self._optional(self.read_octets))

    def read_get_list_response(self) -> GetListResponse:
        self._expect_list(7, "get list response")
        client_id = self._optional(self.read_octets)
        server_id = self.read_octets()
        list_name = self._optional(self.read_octets)
        act_sensor_time = self._optional(self.read_time)

        offset = self.pos
        tl_type, count, _ = self._read_tl()
        if tl_type != TYPE_LIST:
            raise ParseError(f"Expected value list at offset {offset}")
        val_list = [self.read_list_entry() for _ in range(count)]

        return GetListResponse(
            client_id=client_id,
            server_id=server_id,
            list_name=list_name,
            act_sensor_time=act_sensor_time,
            val_list=val_list,
            list_signature=self._optional(self.read_octets),
            act_gateway_time=self._optional(self.read_time),
        )

    def read_message(self) -> Message:
        self._expect_list(6, "SML message")
        transaction_id = self.read_octets()
        group_no = self.read_int()
        abort_on_error = self.read_int()

        self._expect_list(2, "message body")
        tag = self.read_int()
        if tag == OPEN_RESPONSE:
            body = self.read_open_response()
        elif tag == CLOSE_RESPONSE:
            body = self.read_close_response()
        elif tag == GET_LIST_RESPONSE:
            body = self.read_get_list_response()
        else:
            self.read_value()
            body = UnknownBody(tag=tag)

        crc = self.read_int()
        offset = self.pos
        if self._next_byte() != END_OF_MESSAGE:
            raise ParseError(f"Missing end of message marker at offset {offset}")

        return Message(
            transaction_id=transaction_id,
            group_no=group_no,
            abort_on_error=abort_on_error,
            message_body=body,
            crc=crc,
        )
