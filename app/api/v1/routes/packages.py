from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.v1.dependencies import get_current_identity
from app.core.security import Identity
from app.db.session import get_db
from app.repositories.package_repository import PackageRepository
from app.schemas.package import PackageResponse
from app.services.catalog_service import CatalogService

router = APIRouter(tags=["packages"])


@router.get("", response_model=List[PackageResponse])
def list_packages(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
):
    """Active packages available for purchase."""
    return CatalogService(PackageRepository(db), identity).list_active()
