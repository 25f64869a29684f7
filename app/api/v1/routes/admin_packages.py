from typing import List

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.v1.dependencies import require_admin
from app.core.security import Identity
from app.db.session import get_db
from app.repositories.package_repository import PackageRepository
from app.schemas.package import PackageEditForm, PackageForm, PackageResponse
from app.services.catalog_service import CatalogService

router = APIRouter(tags=["admin"])


def _service(db: Session, identity: Identity) -> CatalogService:
    return CatalogService(PackageRepository(db), identity)


@router.get("", response_model=List[PackageResponse])
def list_packages(
    include_inactive: bool = Query(True),
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _service(db, identity).list(include_inactive=include_inactive)


@router.post("", response_model=PackageResponse, status_code=status.HTTP_201_CREATED)
def create_package(
    form: PackageForm,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _service(db, identity).create(form)


@router.get("/{package_id}/form", response_model=PackageEditForm)
def get_edit_form(
    package_id: str,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _service(db, identity).edit_form(package_id)


@router.put("/{package_id}", response_model=PackageResponse)
def update_package(
    package_id: str,
    form: PackageForm,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return _service(db, identity).update(package_id, form)


@router.delete("/{package_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_package(
    package_id: str,
    identity: Identity = Depends(require_admin),
    db: Session = Depends(get_db),
):
    _service(db, identity).delete(package_id)
    return None
