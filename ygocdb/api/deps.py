"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, Request

from ygocdb.services.container import Services


def get_services(request: Request) -> Services:
    """The service container built by the app lifespan."""
    services: Services = request.app.state.services
    return services


ServicesDep = Annotated[Services, Depends(get_services)]
