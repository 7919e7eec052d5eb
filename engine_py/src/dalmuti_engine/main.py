"""FastAPI main application for the Dalmuti game backend"""

import logging

from .config import Settings
from .ws.server import create_app

settings = Settings.from_env()

# Configure logging
logging.basicConfig(level=settings.log_level.upper())
logger = logging.getLogger(__name__)

app = create_app(settings)

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.host, port=settings.port)
