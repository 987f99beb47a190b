"""
SnapStyle: photo restyling studio backend.

    python main.py              # dev server, reloads on change
    uvicorn main:app            # production
"""

import uvicorn

from snapstyle.core.config import get_settings
from snapstyle.factory import create_app

app = create_app()

if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
