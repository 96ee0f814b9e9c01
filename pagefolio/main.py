from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from pagefolio import models, database
from pagefolio.config import CORS_ORIGINS
from pagefolio.logging_config import setup_logging, logger
from pagefolio.api.errors import register_error_handlers
from pagefolio.api.pages import router as pages_router
from pagefolio.api.projects import router as projects_router

app = FastAPI(title="Pagefolio API")

# Register routers
app.include_router(pages_router, prefix="/api")
app.include_router(projects_router, prefix="/api")

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.on_event("startup")
def startup():
    setup_logging()
    # Create all tables
    models.Base.metadata.create_all(bind=database.engine)
    logger.info("Pagefolio API started")


@app.get("/health", tags=["system"])
def health_check():
    return {"status": "ok"}


if __name__ == "__main__":
    uvicorn.run("pagefolio.main:app", host="0.0.0.0", port=8000, reload=True)
