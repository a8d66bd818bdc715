"""Request bodies for the HTTP routes."""
from typing import Any, Optional
from pydantic import BaseModel, Field

from sitecalc.config import Variant


class ProjectCreateRequest(BaseModel):
    name: str


class RenameRequest(BaseModel):
    name: str


class TitlePageUpdate(BaseModel):
    date_sent: Optional[str] = None
    job_address: Optional[str] = None
    to_address: Optional[str] = None


class CalculatorCreateRequest(BaseModel):
    name: str
    variant: Variant = Field(..., description="SquareFootage | ThreeField | SevenField | Measurement")


class SectionRenameRequest(BaseModel):
    title: str


class FieldUpdateRequest(BaseModel):
    field: str = Field(..., description="e.g. measurement, quantity, product_code, description_three")
    value: Any = None


class ProductCreateRequest(BaseModel):
    code: str
    name: str = ""
    price: float = 0.0
    id: Optional[str] = None


class ProductUpdateRequest(BaseModel):
    code: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
