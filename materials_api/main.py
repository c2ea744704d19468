import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

from materials_api.core import config
from materials_api.core.errors import register_exception_handlers
from materials_api.database import Base, engine, ensure_materials_schema
from materials_api.models import material, user  # noqa: F401  registers tables on Base
from materials_api.routes import auth_routes, material_routes

logging.basicConfig(
    level=config.LOG_LEVEL,
    format='%(asctime)s %(levelname)s %(name)s: %(message)s',
)
logger = logging.getLogger(__name__)

app = FastAPI(title='Materials API', debug=config.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

register_exception_handlers(app)


@app.on_event('startup')
def initialize_database() -> None:
    config.validate_runtime_config()
    try:
        Base.metadata.create_all(bind=engine)
        ensure_materials_schema()
    except SQLAlchemyError:
        logger.exception('Database initialization failed. Check DATABASE_URL and database credentials.')


@app.get('/')
def root():
    return {'success': True, 'status': 'Materials API Running'}


app.include_router(auth_routes.router, prefix='/api/v1/auth')
app.include_router(material_routes.router, prefix='/api/v1/materials')
