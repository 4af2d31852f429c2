import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from robobracket import __version__
from robobracket.config import CORS_ORIGINS, LOG_LEVEL
from robobracket.database import init_db
from robobracket.routes import draw, events, runtime, teams

logging.basicConfig(level=LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="RoboBracket API", version=__version__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(events.router, prefix="/api", tags=["events"])
app.include_router(teams.router, prefix="/api", tags=["teams"])
# Qualifier and bracket generation
app.include_router(draw.router, prefix="/api", tags=["draw"])
# Score entry + advancement
app.include_router(runtime.router, prefix="/api", tags=["runtime"])


@app.on_event("startup")
def on_startup():
    init_db()
    logger.info("RoboBracket API %s started, %d routes", __version__, len(app.routes))


@app.get("/api/health")
def health_check():
    return {"app_name": "RoboBracket API", "version": __version__, "status": "healthy"}
