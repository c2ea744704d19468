from sqlalchemy.orm import Session, joinedload

from materials_api.database import commit_or_rollback
from materials_api.models.material import Material


def get_material(db: Session, material_id: int, with_owner: bool = False) -> Material | None:
    query = db.query(Material)
    if with_owner:
        query = query.options(joinedload(Material.owner))
    return query.filter(Material.id == material_id).first()


def create_material(db: Session, **fields) -> Material:
    material = Material(**fields)
    db.add(material)
    commit_or_rollback(db)
    db.refresh(material)
    return material


def update_material(db: Session, material: Material, changes: dict) -> Material:
    for key, value in changes.items():
        setattr(material, key, value)
    commit_or_rollback(db)
    db.refresh(material)
    return material


def delete_material(db: Session, material: Material) -> None:
    db.delete(material)
    commit_or_rollback(db)


def attach_file(db: Session, material: Material, file_url: str, file_type: str) -> Material:
    return update_material(db, material, {"file_url": file_url, "file_type": file_type})
