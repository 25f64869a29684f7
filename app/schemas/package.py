from pydantic import BaseModel, Field
from datetime import datetime
from typing import List, Optional, Union

from app.schemas.common import Money


class PackageForm(BaseModel):
    """
    Admin form payload. Kept loose on purpose: name/price/cycle are validated by
    the catalog service so that form mistakes surface as ValidationError.
    """
    name: Optional[str] = None
    description: Optional[str] = None
    price: Union[str, float, None] = None
    currency: Optional[str] = None
    billing_cycle: Optional[str] = None
    features: Union[str, List[str], None] = Field(None, description="Text block (one feature per line) or list")
    is_active: Optional[bool] = None


class PackageResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    price: Money
    currency: str
    billing_cycle: str
    features: List[str] = []
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PackageEditForm(BaseModel):
    """Values used to prefill the edit dialog; features joined one per line."""
    id: str
    name: str
    description: str = ""
    price: str
    currency: str
    billing_cycle: str
    features: str = ""
    is_active: bool
