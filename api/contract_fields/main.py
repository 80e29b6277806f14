from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .routers import contracts, documents, fields
from .db import init_db
from .exception_handler import setup_exception_handlers
from .logging_config import configure_logging

app = FastAPI(title="Contract Field Placement API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

setup_exception_handlers(app)

@app.on_event("startup")
def on_startup():
    configure_logging()
    init_db()

app.include_router(contracts.router, prefix="/api/contracts", tags=["contracts"])
app.include_router(documents.router, prefix="/api/contracts", tags=["documents"])  # nested
app.include_router(fields.router, prefix="/api/contracts", tags=["fields"])  # nested

@app.get("/")
def root():
    return {"ok": True, "service": "contract-fields-api"}
