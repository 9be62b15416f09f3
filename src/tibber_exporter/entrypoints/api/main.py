import logging
from contextlib import asynccontextmanager
from typing import Annotated

from fastapi import Depends, FastAPI, status
from fastapi.responses import PlainTextResponse

from tibber_exporter.adapters.tibber import TibberBridgeAdapter
from tibber_exporter.domain.configuration import HostConfig
from tibber_exporter.entrypoints.api import dependencies
from tibber_exporter.exceptions import ExporterError
from tibber_exporter.services.consumption import ConsumptionService
from tibber_exporter.services.exposition import CONTENT_TYPE, render_consumption

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    gateway = TibberBridgeAdapter(config=app.state.host_config)
    app.state.consumption_service = ConsumptionService(gateway=gateway)

    yield

    # Shutdown
    await gateway.close()


async def metrics(
    consumption_service: Annotated[ConsumptionService, Depends(dependencies.get_consumption_service)],
) -> PlainTextResponse:
    try:
        data = await consumption_service.fetch_consumption()
    except ExporterError as e:
        logger.error(f"Failed to fetch consumption data: {e}")
        return PlainTextResponse(str(e), status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return PlainTextResponse(render_consumption(data), media_type=CONTENT_TYPE)


def create_app(config: HostConfig) -> FastAPI:
    app = FastAPI(title="Tibber Exporter", lifespan=lifespan)
    app.state.host_config = config
    app.add_api_route("/metrics", metrics, methods=["GET"], response_class=PlainTextResponse)
    return app
