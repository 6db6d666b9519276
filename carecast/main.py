from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import CONFIG
from .routes import forecasts as forecast_routes

logging.getLogger("carecast").setLevel(CONFIG.log_level)

app = FastAPI(
    title="Carecast API",
    version="0.1.0",
    description="Forecasts the next feeding, diaper change, sleep and pumping session",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CONFIG.allowed_origins,
    allow_methods=["*"],
    allow_headers=["*"],
    allow_credentials=False,
)

app.include_router(forecast_routes.router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
