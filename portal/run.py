"""Run script for the applicant portal service"""

import uvicorn
from dotenv import load_dotenv
import sys
from pathlib import Path

# Add parent directory to path
ROOT_DIR = Path(__file__).resolve().parent
if str(ROOT_DIR.parent) not in sys.path:
    sys.path.append(str(ROOT_DIR.parent))

# Load environment variables before settings are read
load_dotenv(ROOT_DIR.parent / ".env")

from portal.app.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "portal.app.main:app",
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        reload=settings.DEBUG,
        log_level="info"
    )
