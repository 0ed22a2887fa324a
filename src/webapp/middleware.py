# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Gate chain: ordered route groups with checkpoints between them.

Stages are tried in the order they were added. A route group answers when one
of its routes fully matches the request; a gate answers when it returns a
response. The first stage that answers ends the chain; if none does the
request gets a 404. So a request for an admin page walks through the public
routes (no match), the login gate (passes), the logged-in routes (no match),
the admin gate (passes) and is finally served by the admin routes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence, Union

from fastapi import Request, Response
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from starlette.routing import BaseRoute, Match

from webapp.errors import InfrastructureError

logger = logging.getLogger(__name__)

Gate = Callable[[Request], Optional[Response]]
CallNext = Callable[[Request], Awaitable[Response]]


@dataclass(frozen=True)
class RouteGroup:
    name: str
    routes: Sequence[BaseRoute]

    def matches(self, request: Request) -> bool:
        for route in self.routes:
            match, _ = route.matches(request.scope)
            if match == Match.FULL:
                return True
        return False


@dataclass(frozen=True)
class GateStage:
    name: str
    gate: Gate


Stage = Union[RouteGroup, GateStage]


class GateChain:
    def __init__(self) -> None:
        self.stages: List[Stage] = []

    def add_routes(self, name: str, routes: Iterable[BaseRoute]) -> "GateChain":
        self.stages.append(RouteGroup(name, tuple(routes)))
        return self

    def add_gate(self, gate: Gate, name: str = "") -> "GateChain":
        self.stages.append(GateStage(name or gate.__name__, gate))
        return self

    async def __call__(self, request: Request, call_next: CallNext) -> Response:
        for stage in self.stages:
            if isinstance(stage, RouteGroup):
                if stage.matches(request):
                    return await call_next(request)
                continue

            try:
                response = await run_in_threadpool(stage.gate, request)
            except InfrastructureError:
                logger.exception("Gate %s failed for %s %s", stage.name, request.method, request.url.path)
                return PlainTextResponse("500 internal server error", status_code=500)
            if response is not None:
                logger.debug("Gate %s stopped %s %s", stage.name, request.method, request.url.path)
                return response

        return PlainTextResponse("404 page not found", status_code=404)
