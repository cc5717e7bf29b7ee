"""HTTP surface: order lookup, acceptance trigger and health."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from ..domain.models import OrderAccepted
from ..primitives.exceptions import SerializationFailure, TransportFailure

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from ..bootstrap import OrderRelay

logger = logging.getLogger("order_relay.api")


def create_app(relay: OrderRelay, *, manage_lifecycle: bool = True) -> FastAPI:
    """Build the FastAPI app around *relay*.

    With ``manage_lifecycle`` the relay is started and stopped by the app
    lifespan.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if manage_lifecycle:
            await relay.start()
        try:
            yield
        finally:
            if manage_lifecycle:
                await relay.stop()

    app = FastAPI(title="Order Relay", lifespan=lifespan)
    app.state.relay = relay

    @app.get("/orders/{order_id}")
    async def get_order(order_id: int, status: str = Query(...)) -> Response:
        logger.info(
            "Received request to find Order with id '%s' and status '%s'",
            order_id,
            status,
        )
        order = relay.processor.get_order(order_id)
        if order is None:
            logger.warning("Order with id '%s' not found", order_id)
            return Response(status_code=404)
        if order.status.value != status:
            logger.warning(
                "Order with id '%s' has status '%s', expected '%s'",
                order_id,
                order.status.value,
                status,
            )
            return Response(status_code=404)
        return JSONResponse(order.model_dump(mode="json", by_alias=True))

    @app.put("/orders")
    async def update_order(request: OrderAccepted) -> Response:
        logger.info("Received update request: %s", request)
        try:
            await relay.processor.accept_order(request)
        except (SerializationFailure, TransportFailure):
            logger.exception("Error processing update request")
            return PlainTextResponse("Failed to process update", status_code=500)
        logger.info("Order %s update notification sent", request.id)
        return PlainTextResponse("Notification triggered.")

    @app.get("/health")
    async def health(req: Request) -> JSONResponse:
        report = await req.app.state.relay.health()
        return JSONResponse(report, status_code=200 if report["status"] == "ok" else 503)

    return app
