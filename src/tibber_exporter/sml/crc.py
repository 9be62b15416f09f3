def crc16_x25(data: bytes) -> int:
    """Compute the CRC-16/X-25 used by SML (x^16 + x^12 + x^5 + 1, reflected).

    Same polynomial as the HDLC frame check sequence, with the final
    value inverted.
    """

    crc = 0xFFFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x0001:
                crc = (crc >> 1) ^ 0x8408
            else:
                crc >>= 1
    return crc ^ 0xFFFF
