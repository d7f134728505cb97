"""FastAPI endpoints for the Catalogue context.

Create and update accept either ``multipart/form-data`` (with an optional
``image`` file part) or a JSON object. Catalogue calls block on storage and
disk, so they run in the threadpool.
"""

from fastapi import APIRouter, Request
from starlette.concurrency import run_in_threadpool
from starlette.datastructures import UploadFile

from catalogue.api.schemas import ProductDeletedResponse, ProductResponse
from catalogue.product.catalog import ProductCatalog
from catalogue.product.images import ImageUpload
from catalogue.product.product import ProductFields
from shared.http import read_json

product_router = APIRouter(prefix="/products", tags=["products"])

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _catalog(request: Request) -> ProductCatalog:
    return request.app.state.catalog


async def _read_product_request(request: Request) -> tuple[ProductFields, ImageUpload | None]:
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(_FORM_TYPES):
        return ProductFields.parse(await read_json(request)), None

    max_bytes = _catalog(request).images.max_bytes
    async with request.form() as form:
        payload = {key: value for key, value in form.multi_items() if not isinstance(value, UploadFile)}
        upload = form.get("image")
        image = None
        if isinstance(upload, UploadFile) and upload.filename:
            # One byte past the cap is enough to reject the file as too large.
            data = await upload.read(max_bytes + 1)
            image = ImageUpload(filename=upload.filename, content_type=upload.content_type or "", data=data)
    return ProductFields.parse(payload), image


@product_router.get("", response_model=list[ProductResponse])
def list_products(request: Request) -> list[ProductResponse]:
    return [ProductResponse.from_product(product) for product in _catalog(request).list_products()]


@product_router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, request: Request) -> ProductResponse:
    return ProductResponse.from_product(_catalog(request).get_product(product_id))


@product_router.post("", status_code=201, response_model=ProductResponse)
async def create_product(request: Request) -> ProductResponse:
    fields, image = await _read_product_request(request)
    product = await run_in_threadpool(_catalog(request).create_product, fields, image)
    return ProductResponse.from_product(product)


@product_router.put("/{product_id}", response_model=ProductResponse)
async def update_product(product_id: int, request: Request) -> ProductResponse:
    fields, image = await _read_product_request(request)
    product = await run_in_threadpool(_catalog(request).update_product, product_id, fields, image)
    return ProductResponse.from_product(product)


@product_router.delete("/{product_id}", response_model=ProductDeletedResponse)
def delete_product(product_id: int, request: Request) -> ProductDeletedResponse:
    product = _catalog(request).delete_product(product_id)
    return ProductDeletedResponse(deleted_product=ProductResponse.from_product(product))
