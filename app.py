"""Entry-point script – simply delegates to Uvicorn with the FastAPI app that
lives in the ``sf2tf`` package."""

import uvicorn

from sf2tf import config


if __name__ == "__main__":
    # For development: uvicorn sf2tf:app --reload --port 5001
    uvicorn.run(
        "sf2tf:app",
        host=config.get('api', {}).get('host', "127.0.0.1"),
        port=config.get('api', {}).get('port', 5001),
        reload=config.get('api', {}).get('debug', False),
    )
