"""Shared fixtures, most importantly an SML encoder to build realistic payloads."""

from decimal import Decimal

import pytest

from tibber_exporter.domain.configuration import HostConfig
from tibber_exporter.domain.consumption import OBIS_CURRENT_POWER, OBIS_TOTAL_ENERGY, ConsumptionData
from tibber_exporter.sml.crc import crc16_x25
from tibber_exporter.sml.transport import ESCAPE, START

UNIT_WATT = 27
UNIT_WATT_HOUR = 30


class SmlEncoder:
    """Minimal SML writer, the inverse of the parser, for test data only."""

    def tl(self, tl_type: int, length: int) -> bytes:
        if length < 16:
            return bytes([(tl_type << 4) | length])
        return bytes([0x80 | (tl_type << 4) | (length >> 4), length & 0x0F])

    def _sized(self, tl_type: int, payload: bytes) -> bytes:
        total = len(payload) + 1
        if total >= 16:
            total += 1
        return self.tl(tl_type, total) + payload

    def octets(self, data: bytes) -> bytes:
        return self._sized(0b000, data)

    def boolean(self, value: bool) -> bytes:
        return self._sized(0b100, b"\x01" if value else b"\x00")

    def signed(self, value: int, size: int) -> bytes:
        return self._sized(0b101, value.to_bytes(size, "big", signed=True))

    def unsigned(self, value: int, size: int) -> bytes:
        return self._sized(0b110, value.to_bytes(size, "big"))

    def lst(self, *items: bytes) -> bytes:
        return self.tl(0b111, len(items)) + b"".join(items)

    def absent(self) -> bytes:
        return b"\x01"

    def sec_index(self, value: int) -> bytes:
        return self.lst(self.unsigned(1, 1), self.unsigned(value, 4))

    def list_entry(self, obj_name: bytes, value: bytes, scaler=None, unit=None, status=None) -> bytes:
        return self.lst(
            self.octets(obj_name),
            self.absent() if status is None else self.unsigned(status, 4),
            self.absent(),
            self.absent() if unit is None else self.unsigned(unit, 1),
            self.absent() if scaler is None else self.signed(scaler, 1),
            value,
            self.absent(),
        )

    def message(self, tag: int, body: bytes, transaction_id: bytes = b"\x00\x01") -> bytes:
        # The end of message marker is the sixth list element
        return (
            self.tl(0b111, 6)
            + self.octets(transaction_id)
            + self.unsigned(0, 1)
            + self.unsigned(0, 1)
            + self.lst(self.unsigned(tag, 4), body)
            + self.unsigned(0x1234, 2)
            + b"\x00"
        )

    def open_response(self, server_id: bytes = b"\x0a\x01\x48\x41\x47") -> bytes:
        body = self.lst(
            self.absent(),
            self.absent(),
            self.octets(b"\x00\x7f\x01\x02"),
            self.octets(server_id),
            self.absent(),
            self.absent(),
        )
        return self.message(0x0101, body, transaction_id=b"\x00\x01")

    def get_list_response(self, *entries: bytes, server_id: bytes = b"\x0a\x01\x48\x41\x47") -> bytes:
        body = self.lst(
            self.absent(),
            self.octets(server_id),
            self.absent(),
            self.sec_index(1234567),
            self.lst(*entries),
            self.absent(),
            self.absent(),
        )
        return self.message(0x0701, body, transaction_id=b"\x00\x02")

    def close_response(self) -> bytes:
        return self.message(0x0201, self.lst(self.absent()), transaction_id=b"\x00\x03")

    def consumption_list(self, power: int = 2500, power_scaler: int = -1,
                         energy: int = 12345678, energy_scaler: int = -3) -> bytes:
        return self.get_list_response(
            self.list_entry(b"\x81\x81\xc7\x82\x03\xff", self.octets(b"ISK")),
            self.list_entry(OBIS_TOTAL_ENERGY, self.unsigned(energy, 4), scaler=energy_scaler,
                            unit=UNIT_WATT_HOUR, status=0x00010182),
            self.list_entry(OBIS_CURRENT_POWER, self.signed(power, 4), scaler=power_scaler, unit=UNIT_WATT),
        )

    def frame(self, payload: bytes, swap_crc: bool = False) -> bytes:
        padding = (-len(payload)) % 4
        padded = payload + b"\x00" * padding
        words = []
        for i in range(0, len(padded), 4):
            word = padded[i : i + 4]
            words.append(ESCAPE + ESCAPE if word == ESCAPE else word)
        head = START + b"".join(words) + ESCAPE + bytes([0x1A, padding])
        crc = crc16_x25(head)
        return head + crc.to_bytes(2, "little" if swap_crc else "big")

    def consumption_frame(self, **kwargs) -> bytes:
        return self.frame(self.open_response() + self.consumption_list(**kwargs) + self.close_response())


@pytest.fixture
def sml_encoder():
    return SmlEncoder()


@pytest.fixture
def host_config():
    return HostConfig(host="192.168.1.50", node_id=1, password="test_password")


@pytest.fixture
def consumption_data():
    return ConsumptionData(current_power_w=Decimal("250.0"), total_consumption_wh=Decimal("12345.678"))
