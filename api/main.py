"""FastAPI application entry point."""
from contextlib import asynccontextmanager

from fastapi import FastAPI

from api.routes import router
from core.airports import AirportDirectory
from core.config import Settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Settings and the airport table are built once here and shared by all requests.
    settings = Settings.from_env()
    app.state.settings = settings
    app.state.airports = AirportDirectory(settings.airports_path).load()
    yield


app = FastAPI(title="SeatSide API", version="0.1.0", lifespan=lifespan)
app.include_router(router)
