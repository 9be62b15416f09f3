from decimal import Decimal

from pydantic import BaseModel, ConfigDict

# See https://wiki.volkszaehler.org/software/obis for relevant IDs
OBIS_CURRENT_POWER = bytes([1, 0, 16, 7, 0, 255])  # 1-0:16.7.0*255
OBIS_TOTAL_ENERGY = bytes([1, 0, 1, 8, 0, 255])  # 1-0:1.8.0*255


class ConsumptionData(BaseModel):
    model_config = ConfigDict(frozen=True)

    current_power_w: Decimal  # negative while exporting
    total_consumption_wh: Decimal


def obis_to_str(obis: bytes) -> str:
    """Format a 6 byte object name as ``A-B:C.D.E*F``, anything else as hex."""
    if len(obis) != 6:
        return obis.hex()
    a, b, c, d, e, f = obis
    return f"{a}-{b}:{c}.{d}.{e}*{f}"
