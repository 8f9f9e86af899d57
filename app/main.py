import logging
from fastapi import FastAPI
from app.config import get_settings
from app.api.routes import slack, oauth

settings = get_settings()

# Configure application logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# Set log level for app modules
logger = logging.getLogger("app")
logger.setLevel(logging.DEBUG if settings.debug else logging.INFO)

# slack_sdk logs request/response bodies at DEBUG
logging.getLogger("slack_sdk").setLevel(logging.DEBUG if settings.debug else logging.WARNING)

app = FastAPI(
    title=settings.app_name,
    description="Set your Slack presence, status and do-not-disturb everywhere with one command",
    version="0.1.0",
)

# Include routers
app.include_router(slack.router, prefix="/slack", tags=["Slash Commands"])
app.include_router(oauth.router, tags=["OAuth"])


@app.get("/")
async def root():
    return {
        "message": "Welcome to SlackOverload",
        "version": "0.1.0",
        "endpoints": {
            "commands": "/slack",
            "oauth": "/oauth",
            "health": "/health",
            "docs": "/docs",
        },
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": settings.app_name}
