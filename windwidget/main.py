"""FastAPI application setup for the wind widget backend."""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import api


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    api.SERVICE.close()


app = FastAPI(title="Wind Widget", lifespan=lifespan)

# API routes
app.include_router(api.router, prefix="/v1")
