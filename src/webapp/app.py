# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse

from webapp.config import AppConfig, load_config
from webapp.errors import InfrastructureError
from webapp.logs import setup_logging
from webapp.middleware import GateChain
from webapp.permissions import require_admin, require_login
from webapp.routes import admin, public, secure
from webapp.services import Services

logger = logging.getLogger(__name__)

ERROR_PAGE = """<!doctype html>
<html>
  <body>
    <h1>500 internal server error</h1>
    <p>Something went wrong on our side. Please try again later.</p>
  </body>
</html>
"""


def create_app(config: Optional[AppConfig] = None, *, services: Optional[Services] = None) -> FastAPI:
    """Build the application: stores, admin bootstrap, routers and the gate chain."""
    if services is not None:
        config = services.config
    config = config or load_config()
    setup_logging(config)

    services = services or Services.build(config)
    services.credentials.ensure_admin_account()

    app = FastAPI(title=config.app_name, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.services = services

    public_routes = list(public.router.routes)
    app.include_router(public.router)
    if config.open_registration:
        public_routes += public.registration_router.routes
        app.include_router(public.registration_router)
    app.include_router(secure.router)
    app.include_router(admin.router)

    chain = GateChain()
    chain.add_routes("public", public_routes)
    chain.add_gate(require_login)
    chain.add_routes("secure", secure.router.routes)
    chain.add_gate(require_admin)
    chain.add_routes("admin", admin.router.routes)
    app.middleware("http")(chain)

    @app.exception_handler(InfrastructureError)
    async def _infrastructure_error(request: Request, exc: InfrastructureError):
        logger.error(
            "Infrastructure error on %s %s: %s",
            request.method,
            request.url.path,
            exc,
            exc_info=(type(exc), exc, exc.__traceback__),
        )
        return HTMLResponse(ERROR_PAGE, status_code=500)

    logger.info("%s ready (open registration: %s)", config.app_name, config.open_registration)
    return app
