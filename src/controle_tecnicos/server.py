"""
HTTP service for the technician matcher.

Endpoints:
    POST /calcular   - Nearest technician and price for {"endereco": "..."}
    GET  /health     - Roster readability

The optional static front end is served from ``STATIC_DIR`` when that
directory exists.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from controle_tecnicos.client import TechnicianLocator
from controle_tecnicos.config import Settings
from controle_tecnicos.exceptions import (
    AddressNotProvided,
    AddressUnresolvable,
    NoTechnicianAvailable,
)

logger = logging.getLogger(__name__)

MSG_NOT_PROVIDED = "Endereço não informado"
MSG_UNRESOLVABLE = "Endereço do atendimento inválido ou não encontrado"
MSG_NO_TECHNICIAN = "Nenhum técnico disponível com endereço válido"


class CalculoRequest(BaseModel):
    endereco: Optional[str] = None


def create_app(
    locator: Optional[TechnicianLocator] = None,
    settings: Optional[Settings] = None,
) -> FastAPI:
    """Build the app; a locator passed in is not closed on shutdown."""
    settings = settings or Settings.from_env()
    owns_locator = locator is None
    locator = locator or TechnicianLocator(settings=settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Roster at {settings.roster_path}")
        yield
        if owns_locator:
            locator.close()

    app = FastAPI(title="Controle de Técnicos", version="1.0.0", lifespan=lifespan)
    app.state.locator = locator

    @app.exception_handler(AddressNotProvided)
    async def _not_provided(request: Request, exc: AddressNotProvided):
        return JSONResponse(status_code=400, content={"erro": MSG_NOT_PROVIDED})

    @app.exception_handler(AddressUnresolvable)
    async def _unresolvable(request: Request, exc: AddressUnresolvable):
        return JSONResponse(status_code=400, content={"erro": MSG_UNRESOLVABLE})

    @app.exception_handler(NoTechnicianAvailable)
    async def _no_technician(request: Request, exc: NoTechnicianAvailable):
        return JSONResponse(status_code=404, content={"erro": MSG_NO_TECHNICIAN})

    @app.post("/calcular")
    def calcular(body: Optional[CalculoRequest] = None):
        # No body at all is the same as a missing address
        result = app.state.locator.find_nearest(body.endereco if body else None)
        return {"tecnico": result.to_dict()}

    @app.get("/health")
    def health():
        return app.state.locator.health_check()

    if settings.static_dir.is_dir():
        app.mount(
            "/", StaticFiles(directory=settings.static_dir, html=True), name="frontend"
        )

    return app


def main() -> None:
    """Run the service under uvicorn on HOST:PORT."""
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    logger.info(f"Server listening on port {settings.port}")
    uvicorn.run(create_app(settings=settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
