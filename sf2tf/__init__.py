import os

from sf2tf.config import config
from .utils.logger import setup_logger

# Ensure the directory structure defined in settings.yaml exists at import
# time so that any service can safely assume the folders are present.
for key, path in config.get('base_dirs', {}).items():
    os.makedirs(path, exist_ok=True)

# Log once during package import so we know the package was initialised.
setup_logger('sf2tf_init').info('sf2tf package initialised with FastAPI backend.')

# ------------------------- FastAPI application ---------------------------

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

app = FastAPI(title="Snowflake DDL to Terraform API", version=config.get('api', {}).get('version', 'v1'))

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


from .api.routes import api_router

app.include_router(api_router)

route_logger = setup_logger('routes')
for route in app.routes:
    if hasattr(route, 'methods'):
        route_logger.debug(f"{sorted(route.methods)}  {route.path}")
