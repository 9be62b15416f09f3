from fastapi import Request

from tibber_exporter.services.consumption import ConsumptionService


def get_consumption_service(request: Request) -> ConsumptionService:
    return request.app.state.consumption_service
