from catalogue.product.seed import DEMO_PRODUCTS, seed_catalogue


def test_seeds_an_empty_catalogue(catalog, stored_assets):
    created = seed_catalogue(catalog)

    assert len(created) == len(DEMO_PRODUCTS)
    assert {p.name for p in catalog.list_products()} == {entry["name"] for entry in DEMO_PRODUCTS}
    assert all(not catalog.images.is_local(p.image_ref) for p in created)
    assert stored_assets() == []


def test_does_not_seed_twice(catalog):
    seed_catalogue(catalog)

    assert seed_catalogue(catalog) == []
    assert len(catalog.list_products()) == len(DEMO_PRODUCTS)
