# Run from project root: uvicorn enrichlab.main:app --reload

import logging

from fastapi import FastAPI

from enrichlab.api.routes import router
from enrichlab.mcp.server import mcp_router

logging.basicConfig(level=logging.INFO)


app = FastAPI(title="Prompt Enrichment Backend")
app.include_router(router)
app.include_router(mcp_router, prefix="/mcp")
