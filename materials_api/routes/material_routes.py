from fastapi import APIRouter, Depends, File, Query, Request, UploadFile, status
from sqlalchemy.orm import Session

from materials_api.auth.dependencies import AuthContext, authorize, protect
from materials_api.database import ensure_database_ready, get_db
from materials_api.models.user import UserRole
from materials_api.schemas.material_schema import (
    EmptyEnvelope,
    FileUploadEnvelope,
    MaterialCreateRequest,
    MaterialDetailEnvelope,
    MaterialEnvelope,
    MaterialListEnvelope,
    MaterialUpdateRequest,
)
from materials_api.services import material_service

router = APIRouter(tags=['materials'])

require_publisher = authorize(UserRole.teacher, UserRole.admin)


@router.get('/', response_model=MaterialListEnvelope)
def get_materials(
    request: Request,
    select: str | None = Query(default=None),
    sort: str | None = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int | None = Query(default=None, ge=1),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    return material_service.list_materials(
        db,
        params=request.query_params.multi_items(),
        select=select,
        sort=sort,
        page=page,
        limit=limit,
    )


@router.get('/{material_id}', response_model=MaterialDetailEnvelope)
def get_material(material_id: int, db: Session = Depends(get_db)):
    ensure_database_ready()
    return {'success': True, 'data': material_service.get_material(db, material_id)}


@router.post('/', response_model=MaterialEnvelope, status_code=status.HTTP_201_CREATED)
def create_material(
    data: MaterialCreateRequest,
    context: AuthContext = Depends(require_publisher),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    return {'success': True, 'data': material_service.create_material(db, context, data)}


@router.put('/{material_id}', response_model=MaterialEnvelope)
def update_material(
    material_id: int,
    data: MaterialUpdateRequest,
    context: AuthContext = Depends(require_publisher),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    return {'success': True, 'data': material_service.update_material(db, context, material_id, data)}


@router.delete('/{material_id}', response_model=EmptyEnvelope)
def delete_material(
    material_id: int,
    context: AuthContext = Depends(require_publisher),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    material_service.delete_material(db, context, material_id)
    return {'success': True, 'data': {}}


@router.put('/{material_id}/file', response_model=FileUploadEnvelope)
def upload_material_file(
    material_id: int,
    file: UploadFile | None = File(default=None),
    context: AuthContext = Depends(protect),
    db: Session = Depends(get_db),
):
    ensure_database_ready()
    file_name = material_service.upload_material_file(db, context, material_id, file)
    return {'success': True, 'data': file_name}
