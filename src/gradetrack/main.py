import os

import uvicorn

from gradetrack.app import app
from gradetrack.config.settings import configure_logging


if __name__ == "__main__":
    configure_logging()
    uvicorn.run(
        app,
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )
