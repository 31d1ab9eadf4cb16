"""FastAPI endpoints for the Catalogue domain."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse, Response
from protean.exceptions import ValidationError

from catalogue.api.schemas import ManufacturerRequest, ProductTypeRequest, RestockRequest
from catalogue.product.browsing import (
    DEFAULT_PRICE_RANGE,
    ProductQuery,
    browse_products,
    product_rows,
    search_products,
)
from catalogue.search import global_search
from shared.backend import get_backend
from shared.pagination import paginate, sliding_page_numbers
from shared.proxy import clean_params, multi_params, read_multipart, relay, relay_page, require_token

BUNDLES_PER_PAGE = 8
MANUFACTURERS_PER_PAGE = 6
PRODUCT_TYPES_PER_PAGE = 10

product_router = APIRouter(prefix="/api/products", tags=["products"])
catalogue_router = APIRouter(prefix="/api", tags=["catalogue"])
admin_catalogue_router = APIRouter(prefix="/api/admin", tags=["admin"])


# --- Product endpoints ---


@product_router.get("")
def list_products(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=5, ge=1, le=100),
    search: str | None = None,
    category_id: str | None = Query(default=None, alias="categoryId"),
    manufacturer_id: list[str] | None = Query(default=None, alias="manufacturerId"),
    product_type_id: list[str] | None = Query(default=None, alias="productTypeId"),
    stock_label: str | None = Query(default=None, alias="stockLabel"),
    in_stock: str | None = None,
) -> Response:
    single = clean_params(
        page=page,
        limit=limit,
        categoryId=category_id,
        stockLabel=stock_label,
        in_stock=in_stock,
        search=search,
    )
    params = multi_params(single, manufacturerId=manufacturer_id, productTypeId=product_type_id)
    return relay(get_backend().get("/products", params=params))


@product_router.get("/browse")
def browse(
    page: int = Query(default=1, ge=1),
    search: str | None = None,
    category_id: str | None = Query(default=None, alias="categoryId"),
    manufacturer_id: list[str] | None = Query(default=None, alias="manufacturerId"),
    product_type_id: list[str] | None = Query(default=None, alias="productTypeId"),
    in_stock: bool = False,
    min_price: float | None = Query(default=None, alias="minPrice", ge=0),
    max_price: float | None = Query(default=None, alias="maxPrice", ge=0),
) -> dict:
    """Storefront grid page with price filtering and the compact page-number window."""
    price_range = None
    if min_price is not None or max_price is not None:
        low = min_price if min_price is not None else DEFAULT_PRICE_RANGE[0]
        high = max_price if max_price is not None else DEFAULT_PRICE_RANGE[1]
        if low > high:
            raise ValidationError({"priceRange": ["minPrice must not exceed maxPrice"]})
        price_range = (low, high)

    query = ProductQuery(
        search=search,
        category_id=category_id,
        manufacturer_ids=manufacturer_id or [],
        product_type_ids=product_type_id or [],
        in_stock=in_stock,
    )
    return browse_products(get_backend(), query, page=page, price_range=price_range).to_dict()


@product_router.get("/search")
def search(q: str = "", limit: int = Query(default=50, ge=1, le=100)) -> dict:
    return {"query": q, "data": search_products(get_backend(), q, limit=limit)}


@product_router.get("/{product_id}")
def get_product(product_id: str) -> Response:
    return relay(get_backend().get(f"/products/{product_id}"))


# --- Public catalogue endpoints ---


@catalogue_router.get("/search")
def search_everything(q: str = "") -> dict:
    return global_search(get_backend(), q)


@catalogue_router.get("/bundles")
def list_bundles(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=BUNDLES_PER_PAGE, ge=1, le=100),
    search: str | None = None,
) -> Response:
    params = clean_params(page=page, limit=limit, activeOnly="true", search=search)
    return relay(get_backend().get("/bundles", params=params))


@catalogue_router.get("/bundles/{bundle_id}")
def get_bundle(bundle_id: str) -> Response:
    return relay(get_backend().get(f"/bundles/{bundle_id}"))


@catalogue_router.get("/categories")
def list_categories(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
) -> Response:
    return relay(get_backend().get("/categories", params={"page": page, "limit": limit}))


@catalogue_router.get("/categories/{category_id}")
def get_category(category_id: str) -> Response:
    return relay(get_backend().get(f"/categories/{category_id}"))


@catalogue_router.get("/manufacturers")
def list_manufacturers(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=MANUFACTURERS_PER_PAGE, ge=1, le=100),
) -> Response:
    return relay(get_backend().get("/manufacturers", params={"page": page, "limit": limit}))


@catalogue_router.get("/manufacturers/{manufacturer_id}")
def get_manufacturer(manufacturer_id: str) -> Response:
    return relay(get_backend().get(f"/manufacturers/{manufacturer_id}"))


@catalogue_router.get("/productTypes")
def list_product_types() -> Response:
    return relay(get_backend().get("/product-types"))


# --- Admin: products ---


@admin_catalogue_router.get("/products")
def admin_list_products(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    search: str | None = None,
    token: str = Depends(require_token),
) -> Response:
    params = clean_params(page=page, limit=limit, search=search)
    return relay_page(get_backend().get("/products", token=token, params=params))


@admin_catalogue_router.post("/products")
async def admin_create_product(request: Request, token: str = Depends(require_token)) -> Response:
    fields, files = await read_multipart(request)
    response = await run_in_threadpool(get_backend().post, "/products", token=token, data=fields, files=files)
    return relay(response)


@admin_catalogue_router.put("/products/{product_id}")
async def admin_update_product(product_id: str, request: Request, token: str = Depends(require_token)) -> Response:
    fields, files = await read_multipart(request)
    response = await run_in_threadpool(
        get_backend().put, f"/products/{product_id}", token=token, data=fields, files=files
    )
    return relay(response)


@admin_catalogue_router.delete("/products/{product_id}")
def admin_delete_product(product_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/products/{product_id}", token=token))


@admin_catalogue_router.post("/products/{product_id}/restock")
def admin_restock_product(product_id: str, body: RestockRequest, token: str = Depends(require_token)) -> Response:
    return relay(
        get_backend().post(f"/products/{product_id}/restock", token=token, json={"quantity": body.quantity})
    )


# --- Admin: bundles ---


@admin_catalogue_router.get("/bundles")
def admin_list_bundles(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=BUNDLES_PER_PAGE, ge=1, le=100),
    active_only: bool = Query(default=False, alias="activeOnly"),
    search: str | None = None,
    token: str = Depends(require_token),
) -> Response:
    params = clean_params(page=page, limit=limit, activeOnly=str(active_only).lower(), search=search)
    return relay(get_backend().get("/admin/bundles", token=token, params=params))


@admin_catalogue_router.get("/bundles/{bundle_id}")
def admin_get_bundle(bundle_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().get(f"/admin/bundles/{bundle_id}", token=token))


@admin_catalogue_router.post("/bundles")
async def admin_create_bundle(request: Request, token: str = Depends(require_token)) -> Response:
    fields, files = await read_multipart(request)
    response = await run_in_threadpool(get_backend().post, "/admin/bundles", token=token, data=fields, files=files)
    return relay(response)


@admin_catalogue_router.put("/bundles/{bundle_id}")
async def admin_update_bundle(bundle_id: str, request: Request, token: str = Depends(require_token)) -> Response:
    fields, files = await read_multipart(request)
    response = await run_in_threadpool(
        get_backend().put, f"/admin/bundles/{bundle_id}", token=token, data=fields, files=files
    )
    return relay(response)


@admin_catalogue_router.delete("/bundles/{bundle_id}")
def admin_delete_bundle(bundle_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/admin/bundles/{bundle_id}", token=token))


# --- Admin: categories ---


@admin_catalogue_router.get("/categories")
def admin_list_categories(token: str = Depends(require_token)) -> Response:
    return relay(get_backend().get("/categories", token=token))


@admin_catalogue_router.post("/categories")
async def admin_create_category(request: Request, token: str = Depends(require_token)) -> Response:
    fields, files = await read_multipart(request)
    response = await run_in_threadpool(get_backend().post, "/categories", token=token, data=fields, files=files)
    return relay(response)


@admin_catalogue_router.put("/categories/{category_id}")
async def admin_update_category(category_id: str, request: Request, token: str = Depends(require_token)) -> Response:
    fields, files = await read_multipart(request)
    response = await run_in_threadpool(
        get_backend().put, f"/categories/{category_id}", token=token, data=fields, files=files
    )
    return relay(response)


@admin_catalogue_router.delete("/categories/{category_id}")
def admin_delete_category(category_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/categories/{category_id}", token=token))


# --- Admin: manufacturers ---


@admin_catalogue_router.get("/manufacturers")
def admin_list_manufacturers(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=MANUFACTURERS_PER_PAGE, ge=1, le=100),
    token: str = Depends(require_token),
) -> Response:
    return relay_page(get_backend().get("/manufacturers", token=token, params={"page": page, "limit": limit}))


@admin_catalogue_router.post("/manufacturers")
def admin_create_manufacturer(body: ManufacturerRequest, token: str = Depends(require_token)) -> Response:
    payload = body.model_dump(by_alias=True, exclude_none=True)
    return relay(get_backend().post("/manufacturers", token=token, json=payload))


@admin_catalogue_router.put("/manufacturers/{manufacturer_id}")
def admin_update_manufacturer(
    manufacturer_id: str, body: ManufacturerRequest, token: str = Depends(require_token)
) -> Response:
    payload = body.model_dump(by_alias=True, exclude_none=True)
    return relay(get_backend().put(f"/manufacturers/{manufacturer_id}", token=token, json=payload))


@admin_catalogue_router.delete("/manufacturers/{manufacturer_id}")
def admin_delete_manufacturer(manufacturer_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/manufacturers/{manufacturer_id}", token=token))


# --- Admin: product types ---


@admin_catalogue_router.get("/productTypes")
def admin_list_product_types(page: int = Query(default=1, ge=1), token: str = Depends(require_token)) -> Response:
    """The backend returns every product type; the admin table pages them here."""
    response = get_backend().get("/product-types", token=token)
    if not response.ok:
        return relay(response)
    items, meta = paginate(product_rows(response.payload), page, PRODUCT_TYPES_PER_PAGE)
    return JSONResponse(
        content={
            "data": items,
            "meta": meta.to_dict(),
            "pageNumbers": sliding_page_numbers(meta.current_page, meta.total_pages),
        }
    )


@admin_catalogue_router.post("/productTypes")
def admin_create_product_type(body: ProductTypeRequest, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().post("/product-types", token=token, json=body.model_dump(by_alias=True)))


@admin_catalogue_router.put("/productTypes/{product_type_id}")
def admin_update_product_type(
    product_type_id: str, body: ProductTypeRequest, token: str = Depends(require_token)
) -> Response:
    return relay(
        get_backend().put(f"/product-types/{product_type_id}", token=token, json=body.model_dump(by_alias=True))
    )


@admin_catalogue_router.delete("/productTypes/{product_type_id}")
def admin_delete_product_type(product_type_id: str, token: str = Depends(require_token)) -> Response:
    return relay(get_backend().delete(f"/product-types/{product_type_id}", token=token))
