"""Material use cases: listing, CRUD with ownership checks and file upload."""

import logging
import os
import shutil
import tempfile

from fastapi import UploadFile, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from materials_api.auth.dependencies import AuthContext
from materials_api.core import config
from materials_api.core.errors import ErrorResponse, bad_request, forbidden, not_found
from materials_api.models.material import Material
from materials_api.repositories import material_repository
from materials_api.schemas.material_schema import (
    MaterialCreateRequest,
    MaterialResponse,
    MaterialUpdateRequest,
)
from materials_api.services.advanced_results import advanced_results
from materials_api.validation import UNSET, validate_material_fields

logger = logging.getLogger(__name__)

MATERIAL_FIELDS = {
    'id',
    'user_id',
    'title',
    'description',
    'content',
    'file_url',
    'file_type',
    'created_at',
    'updated_at',
}
FILTERABLE_FIELDS = {'id', 'user_id', 'title', 'file_type', 'created_at', 'updated_at'}
UPLOAD_ERROR_MESSAGE = 'Problem with file upload'


def serialize_material(material: Material) -> dict:
    return MaterialResponse.model_validate(material).model_dump()


def list_materials(
    db: Session,
    params=(),
    select: str | None = None,
    sort: str | None = None,
    page: int | None = None,
    limit: int | None = None,
) -> dict:
    return advanced_results(
        db,
        Material,
        params=params,
        select=select,
        sort=sort,
        page=page,
        limit=limit,
        fields=MATERIAL_FIELDS,
        filterable=FILTERABLE_FIELDS,
        serialize=serialize_material,
    )


def get_material_or_404(db: Session, material_id: int, with_owner: bool = False) -> Material:
    material = material_repository.get_material(db, material_id, with_owner=with_owner)
    if material is None:
        raise not_found('Material', material_id)
    return material


def ensure_can_modify(context: AuthContext, material: Material, action: str) -> None:
    if not context.owns(material.user_id) and not context.is_admin:
        raise forbidden(f'User {context.user_id} is not authorized to {action} this material')


def get_material(db: Session, material_id: int) -> Material:
    return get_material_or_404(db, material_id, with_owner=True)


def create_material(db: Session, context: AuthContext, data: MaterialCreateRequest) -> Material:
    validate_material_fields(title=data.title, description=data.description).raise_for_errors()

    material = material_repository.create_material(
        db,
        user_id=context.user_id,
        title=data.title.strip(),
        description=data.description,
        content=data.content,
    )
    logger.info('User %s created material %s', context.user_id, material.id)
    return material


def update_material(
    db: Session,
    context: AuthContext,
    material_id: int,
    data: MaterialUpdateRequest,
) -> Material:
    material = get_material_or_404(db, material_id)
    ensure_can_modify(context, material, 'update')

    changes = data.model_dump(exclude_unset=True)
    validate_material_fields(
        title=changes.get('title', UNSET),
        description=changes.get('description', UNSET),
        partial=True,
    ).raise_for_errors()
    if 'title' in changes:
        changes['title'] = changes['title'].strip()

    material = material_repository.update_material(db, material, changes)
    logger.info('User %s updated material %s', context.user_id, material.id)
    return material


def delete_material(db: Session, context: AuthContext, material_id: int) -> None:
    material = get_material_or_404(db, material_id)
    ensure_can_modify(context, material, 'delete')

    material_repository.delete_material(db, material)
    logger.info('User %s deleted material %s', context.user_id, material_id)


def upload_size(upload: UploadFile) -> int:
    size = getattr(upload, 'size', None)
    if size is not None:
        return size
    upload.file.seek(0, os.SEEK_END)
    size = upload.file.tell()
    upload.file.seek(0)
    return size


def format_megabytes(size: int) -> str:
    return f'{size / 1_000_000:g}'


def store_upload(upload: UploadFile, destination: str) -> None:
    """Write the upload beside ``destination`` and move it into place only once complete."""
    directory = os.path.dirname(destination) or '.'
    os.makedirs(directory, exist_ok=True)
    upload.file.seek(0)
    handle, temp_path = tempfile.mkstemp(dir=directory, prefix='.upload-', suffix='.part')
    try:
        with os.fdopen(handle, 'wb') as file_object:
            shutil.copyfileobj(upload.file, file_object)
        os.replace(temp_path, destination)
    except OSError:
        discard_file(temp_path)
        raise


def discard_file(path: str) -> None:
    try:
        os.remove(path)
    except OSError:
        logger.warning('Could not remove orphaned upload %s', path, exc_info=True)


def upload_material_file(
    db: Session,
    context: AuthContext,
    material_id: int,
    upload: UploadFile | None,
) -> str:
    """Store ``upload`` as the material's file and return the stored file name.

    The file is written first and the record updated second. If the record
    update fails, a freshly written file is removed again so nothing on disk
    is left unreferenced.
    """
    material = get_material_or_404(db, material_id)
    ensure_can_modify(context, material, 'update')

    if upload is None or not upload.filename:
        raise bad_request('Please upload a file')

    if not (upload.content_type or '').startswith('application'):
        raise bad_request('Please upload a valid file')

    max_size = config.MAX_FILE_UPLOAD
    if upload_size(upload) > max_size:
        raise bad_request(f'Please upload a file less than {format_megabytes(max_size)}MB')

    extension = os.path.splitext(upload.filename)[1]
    file_name = f'material_{material.id}{extension}'
    file_url = f'{config.FILE_UPLOAD_PATH}/{file_name}'
    previous_url = material.file_url

    try:
        store_upload(upload, file_url)
    except OSError as exc:
        logger.exception('Could not store upload for material %s at %s', material_id, file_url)
        raise ErrorResponse(UPLOAD_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc

    try:
        material_repository.attach_file(db, material, file_url, extension[1:])
    except SQLAlchemyError as exc:
        logger.exception('Could not record upload for material %s', material_id)
        if previous_url != file_url:
            discard_file(file_url)
        raise ErrorResponse(UPLOAD_ERROR_MESSAGE, status.HTTP_500_INTERNAL_SERVER_ERROR) from exc

    logger.info('User %s uploaded %s for material %s', context.user_id, file_name, material.id)
    return file_name
