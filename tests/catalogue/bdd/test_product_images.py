"""BDD tests for the product image lifecycle."""

from catalogue.product.images import ImageStore, ImageUpload
from catalogue.product.product import ProductFields
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/product_images.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(
    parsers.cfparse('a product "{name}" priced {price} is created with an uploaded image'),
    target_fixture="product",
)
def create_with_upload(catalog, png, name, price):
    return catalog.create_product(ProductFields.parse({"name": name, "price": price}), png())


@when(
    parsers.cfparse('a product "{name}" priced {price} is created with a "{content_type}" upload'),
    target_fixture="product",
)
def create_with_typed_upload(catalog, attempt, name, price, content_type):
    upload = ImageUpload(filename="upload.bin", content_type=content_type, data=b"payload")
    return attempt(catalog.create_product, ProductFields.parse({"name": name, "price": price}), upload)


@when("the product image is replaced by a new upload", target_fixture="product")
def replace_upload(catalog, png, product):
    return catalog.update_product(product.id, ProductFields.parse({}), png("replacement.png"))


@when(parsers.cfparse('the product image URL is changed to "{url}"'), target_fixture="product")
def change_url(catalog, product, url):
    return catalog.update_product(product.id, ProductFields.parse({"image_url": url}))


@when("the product is deleted")
def delete_product(catalog, product):
    catalog.delete_product(product.id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the product references a local asset")
def references_local_asset(product):
    assert ImageStore.is_local(product.image_ref)


@then("the remaining asset is the one the product references")
def remaining_asset_is_referenced(stored_assets, product):
    assert stored_assets() == [product.image_ref]


@then(parsers.cfparse('the product image reference is "{ref}"'))
def image_reference_is(product, ref):
    assert product.image_ref == ref
