"""
MBC Tracker
===========
Entry point for the measurement-based care assessment engine.

The actual FastAPI application is defined in mbc_tracker/main.py and
imported here.
"""

# Import the application instance from the package
from mbc_tracker.main import app

# This enables uvicorn to run the application when specified as 'main:app'
if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="127.0.0.1", port=8000)
