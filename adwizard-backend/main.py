import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import CORS_ORIGINS, LOG_LEVEL
from routers.generation import router as generation_router
from routers.jobs import router as jobs_router
from routers.templates import router as templates_router

# --------------------------------------------------------------------------
# --- Configuration & Setup ---
# --------------------------------------------------------------------------

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s - %(levelname)s - %(message)s")

app = FastAPI(
    title="Ad Wizard Backend",
    description="Turns ad wizard answers into AI scripts and Captions.ai videos."
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(generation_router)
app.include_router(jobs_router)
app.include_router(templates_router)


@app.get("/health")
async def health():
    return {"status": "ok"}
