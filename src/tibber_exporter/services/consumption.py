import logging
from decimal import Decimal
from typing import Callable, Iterable, Optional, Sequence, Union

from tibber_exporter import sml
from tibber_exporter.domain.consumption import (
    OBIS_CURRENT_POWER,
    OBIS_TOTAL_ENERGY,
    ConsumptionData,
    obis_to_str,
)
from tibber_exporter.domain.sml import GetListResponse, IntegerValue, ListEntry, Message, SmlValue
from tibber_exporter.exceptions import DecodeError, NoConsumptionDataError
from tibber_exporter.ports.gateway import GatewayPort

logger = logging.getLogger(__name__)

Decoder = Callable[[bytes], Iterable[Union[bytes, DecodeError]]]
Parser = Callable[[bytes], Sequence[Message]]


def sml_value_to_decimal(value: SmlValue, scaler: Optional[int] = None) -> Optional[Decimal]:
    """
    Convert an integer SML value to the exact decimal ``value * 10**scaler``.
    Booleans, octet strings and lists are not convertible and give None.
    """
    if not isinstance(value, IntegerValue):
        return None
    # Shift the exponent instead of multiplying so no context rounding applies
    sign, digits, exponent = Decimal(value.value).as_tuple()
    return Decimal((sign, digits, exponent + (scaler or 0)))


def find_by_obis(response: GetListResponse, obis: bytes) -> Optional[ListEntry]:
    return next((entry for entry in response.val_list if entry.obj_name == obis), None)


def get_scaled_value(response: GetListResponse, obis: bytes) -> Optional[Decimal]:
    entry = find_by_obis(response, obis)
    if entry is None:
        logger.debug(f"OBIS {obis_to_str(obis)} not found in list response")
        return None
    return sml_value_to_decimal(entry.value, entry.scaler)


def extract_consumption(message: Message) -> Optional[ConsumptionData]:
    """
    Build a snapshot from a GetListResponse carrying both the current power
    and the total energy. Anything else gives None, never a partial snapshot.
    """
    body = message.message_body
    if not isinstance(body, GetListResponse):
        return None

    current_power = get_scaled_value(body, OBIS_CURRENT_POWER)
    if current_power is None:
        return None
    total_consumption = get_scaled_value(body, OBIS_TOTAL_ENERGY)
    if total_consumption is None:
        return None

    return ConsumptionData(current_power_w=current_power, total_consumption_wh=total_consumption)


class ConsumptionService:
    def __init__(
        self,
        gateway: GatewayPort,
        decode: Decoder = sml.decode,
        parse: Parser = sml.parse,
    ):
        self.gateway = gateway
        self._decode = decode
        self._parse = parse

    async def fetch_consumption(self) -> ConsumptionData:
        """
        Fetch the gateway payload and return the first consumption snapshot in it.

        The first undecodable or unparsable frame aborts the fetch: frame
        boundaries after a broken frame cannot be trusted.
        """
        data = await self.gateway.get_raw_data()
        logger.debug(f"Received {len(data)} bytes from gateway")

        frames = 0
        for result in self._decode(data):
            if isinstance(result, DecodeError):
                logger.debug(f"Failed to decode SML frame {frames + 1}: {result}")
                raise result
            frames += 1

            messages = self._parse(result)
            for message in messages:
                consumption = extract_consumption(message)
                if consumption is not None:
                    logger.debug(
                        f"Consumption data found in frame {frames}: "
                        f"{consumption.current_power_w} W, {consumption.total_consumption_wh} Wh"
                    )
                    return consumption

        logger.debug(f"No consumption data found in {frames} SML frames")
        raise NoConsumptionDataError()
