import httpx
import logging
from typing import Optional

from tibber_exporter.domain.configuration import HostConfig
from tibber_exporter.exceptions import TransportError

logger = logging.getLogger(__name__)


class TibberBridgeAdapter:
    def __init__(self, config: HostConfig):
        self.config = config
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def url(self) -> str:
        return f"http://{self.config.host}/data.json?node_id={self.config.node_id}"

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            # The bridge protects its local API with Basic Auth
            auth = httpx.BasicAuth(
                username=self.config.username,
                password=self.config.password.get_secret_value(),
            )
            self._client = httpx.AsyncClient(auth=auth, follow_redirects=True)
        return self._client

    async def close(self):
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def get_raw_data(self) -> bytes:
        """
        Fetch the raw SML bytes of the configured node from the Tibber bridge.
        """
        client = self._get_client()

        logger.debug(f"Fetching SML data from {self.url}")
        try:
            response = await client.get(self.url)
        except httpx.HTTPError as e:
            logger.debug(f"Request to Tibber bridge failed: {e}")
            raise TransportError(f"Request to Tibber bridge at {self.config.host} failed: {e}") from e

        if response.status_code == 401:
            logger.debug("Tibber bridge rejected the credentials")
            raise TransportError("Tibber bridge authentication failed. Check password.")
        if not 200 <= response.status_code < 300:
            logger.debug(f"Tibber bridge returned status {response.status_code}")
            raise TransportError(f"Tibber bridge returned HTTP status {response.status_code}")

        return response.content
