import os
from typing import Any, Dict

from fastapi import APIRouter, Body, HTTPException
from fastapi.responses import JSONResponse

from sf2tf.config import config
from sf2tf.services.conversion import ConversionOrchestrator
from sf2tf.utils.logger import setup_logger
from sf2tf.utils.timing import timed

api_router = APIRouter(prefix='/api/v1')

logger = setup_logger('api_routes')


@api_router.get('/health')
def health():
    return {'status': 'ok', 'version': config.get('api', {}).get('version', 'v1')}


@api_router.post('/convert')
def convert_sql_endpoint(payload: Dict[str, Any] = Body(...)):
    """Convert the SQL text in ``payload['sql']`` and return the Terraform."""
    sql = payload.get('sql')
    if not isinstance(sql, str) or not sql.strip():
        raise HTTPException(status_code=400, detail='sql is required')
    prefix_schema = payload.get('prefix_schema')
    if prefix_schema is not None and not isinstance(prefix_schema, bool):
        raise HTTPException(status_code=400, detail='prefix_schema must be a boolean')

    try:
        orchestrator = ConversionOrchestrator(prefix_schema=prefix_schema)
        return timed(orchestrator.convert_text, sql)
    except Exception as e:
        logger.error(f"An unhandled exception occurred in /convert: {e}", exc_info=True)
        return JSONResponse({'error': 'An internal server error occurred.', 'details': str(e)}, status_code=500)


@api_router.post('/convert/folder')
def convert_folder_endpoint(payload: Dict[str, Any] = Body(...)):
    """Convert every .sql file below ``payload['source_path']``."""
    source_path = payload.get('source_path')
    output_dir = payload.get('output_dir')
    if not source_path:
        raise HTTPException(status_code=400, detail='source_path is required')
    if not os.path.exists(source_path):
        return JSONResponse({'error': f'Source path does not exist: {source_path}'}, status_code=404)

    try:
        orchestrator = ConversionOrchestrator(prefix_schema=payload.get('prefix_schema'))
        return timed(orchestrator.convert, source_path, output_dir=output_dir)
    except Exception as e:
        logger.error(f"An unhandled exception occurred in /convert/folder: {e}", exc_info=True)
        return JSONResponse({'error': 'An internal server error occurred.', 'details': str(e)}, status_code=500)
