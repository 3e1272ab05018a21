"""
Development server: python -m casino_lunch
"""

import uvicorn

from .app import create_app
from .config import get_settings

if __name__ == "__main__":
    uvicorn.run(create_app(get_settings()), host="127.0.0.1", port=8000)
