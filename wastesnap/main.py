"""
WasteSnap - Waste Detection Web App
Backend API using FastAPI

Main entry point - creates FastAPI app and mounts routes.
"""

import logging

import uvicorn
from fastapi import FastAPI

from wastesnap.routes import router

# Initialize FastAPI app
app = FastAPI(title="WasteSnap API", version="1.0.0")

# Include API routes
app.include_router(router)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    uvicorn.run(app, host="0.0.0.0", port=8000)
