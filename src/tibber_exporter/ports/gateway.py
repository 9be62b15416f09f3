from typing import Protocol


class GatewayPort(Protocol):
    async def get_raw_data(self) -> bytes:
        """
        Fetch the raw SML payload the gateway currently exposes.
        """
        ...
