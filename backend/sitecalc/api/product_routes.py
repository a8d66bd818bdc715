"""Product catalog routes — list, search, lookup, add, update, delete."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query

from sitecalc.api.deps import get_product_catalog
from sitecalc.models.api_schemas import ProductCreateRequest, ProductUpdateRequest
from sitecalc.models.estimate_models import ProductRecord
from sitecalc.services.product_catalog import ProductCatalog

router = APIRouter(prefix="/api/products", tags=["Products"])


@router.get("", response_model=list[ProductRecord])
async def list_products(catalog: ProductCatalog = Depends(get_product_catalog)):
    return await catalog.list_products()


@router.get("/search", response_model=list[ProductRecord])
async def search_products(
    q: Optional[str] = Query(None, description="Prefix of a product name or code"),
    catalog: ProductCatalog = Depends(get_product_catalog),
):
    return await catalog.search_products(q)


@router.get("/lookup/{code}", response_model=ProductRecord)
async def lookup_product(code: str, catalog: ProductCatalog = Depends(get_product_catalog)):
    product = await catalog.lookup_product_code(code)
    if product is None:
        raise HTTPException(status_code=404, detail=f"Product code not found: {code}")
    return product


@router.post("", response_model=ProductRecord, status_code=201)
async def add_product(req: ProductCreateRequest, catalog: ProductCatalog = Depends(get_product_catalog)):
    return await catalog.add_product(req.code, req.name, req.price, product_id=req.id)


@router.patch("/{product_id}", response_model=ProductRecord)
async def update_product(
    product_id: str,
    req: ProductUpdateRequest,
    catalog: ProductCatalog = Depends(get_product_catalog),
):
    return await catalog.update_product(product_id, req.model_dump(exclude_none=True))


@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: str, catalog: ProductCatalog = Depends(get_product_catalog)):
    await catalog.delete_product(product_id)
