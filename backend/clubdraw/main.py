import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from clubdraw.config import CORS_ORIGINS, LOG_LEVEL
from clubdraw.routes import brackets, groups, schedules, tournaments

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

APP_NAME = "Club Draw API"

app = FastAPI(title=APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(groups.router, prefix="/api", tags=["groups"])
app.include_router(brackets.router, prefix="/api", tags=["brackets"])
app.include_router(schedules.router, prefix="/api", tags=["schedules"])
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])


@app.get("/api/health")
def health_check():
    """Liveness probe"""
    return {"app_name": APP_NAME, "status": "healthy"}


@app.get("/")
def root():
    return {"message": f"{APP_NAME} (stateless tournament structuring engine)"}


logger.info("%s ready with %d routes", APP_NAME, len(app.routes))
