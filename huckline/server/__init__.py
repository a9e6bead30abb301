# Copyright (C) 2025 Richard Owen
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""Heat-map compute service."""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("huckline.server")

_server_start_time: float = 0.0


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler.

    Parameters
    ----------
    app : fastapi.FastAPI
        Application being served.
    """
    global _server_start_time
    _server_start_time = time.time()
    logger.info("Huckline compute service starting")
    yield
    logger.info("Huckline compute service shutting down...")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns
    -------
    fastapi.FastAPI
        Application with the compute routes and a health check.
    """
    from .models import HealthResponse
    from .routes import router

    app = FastAPI(lifespan=lifespan, title="Huckline Compute Service")
    app.include_router(router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return HealthResponse(status="ok", uptime_s=time.time() - _server_start_time)

    return app


app = create_app()
