from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from diagram_pipeline.api.routes import router
from diagram_pipeline.config import CORS_ORIGINS
from diagram_pipeline.logging_config import configure_logging

configure_logging()

app = FastAPI(
    title="Diagram Notation Pipeline",
    version="0.1.0",
)

# Middleware FIRST
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes AFTER middleware
app.include_router(router)


@app.get("/health")
def health():
    return {"status": "ok"}
