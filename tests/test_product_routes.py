"""HTTP-level tests for the product pages."""

import pytest
from sqlalchemy import delete, func, select

from storefront.api.deps import require_login
from storefront.models import Product, ProductTag, Tag
from storefront.services.tag_reconciler import TagReconciler


def form_body(catalogue, **overrides) -> dict:
    data = {
        "name": "Plum",
        "cost": "320",
        "description": "Sweet plum",
        "category_id": str(catalogue.category_ids[1]),
        "image_url": "https://res.cloudinary.com/demo/image/upload/plum.jpg",
    }
    data.update(overrides)
    return data


class TestAuthentication:
    """Every product page requires a signed-in user."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/products"),
            ("GET", "/products/create"),
            ("POST", "/products/create"),
            ("GET", "/products/1/update"),
            ("POST", "/products/1/update"),
            ("GET", "/products/1/delete"),
            ("POST", "/products/1/delete"),
        ],
    )
    async def test_anonymous_requests_redirect_to_login(self, anonymous_client, catalogue, method, path):
        response = await anonymous_client.request(method, path)

        assert response.status_code == 303
        assert response.headers["location"] == "/users/login"

    @pytest.mark.asyncio
    async def test_login_redirect_flashes_error(self, anonymous_client, app, catalogue):
        await anonymous_client.get("/products")

        # The next page rendered shows the pending flash
        app.dependency_overrides[require_login] = lambda: None
        response = await anonymous_client.get("/products")

        assert "You need to sign in to access this page" in response.text

    @pytest.mark.asyncio
    async def test_anonymous_delete_keeps_product(self, anonymous_client, db, make_product):
        product = await make_product("Apple")

        await anonymous_client.post(f"/products/{product.id}/delete")

        assert await db.get(Product, product.id, populate_existing=True) is not None


class TestPages:
    """Test rendering and redirects for signed-in users."""

    @pytest.mark.asyncio
    async def test_root_redirects_to_listing(self, client):
        response = await client.get("/")

        assert response.status_code == 303
        assert response.headers["location"] == "/products"

    @pytest.mark.asyncio
    async def test_listing_shows_products(self, client, make_product):
        await make_product("Apple", tag_ids=(1, 2))

        response = await client.get("/products")

        assert response.status_code == 200
        assert "Apple" in response.text
        assert "organic" in response.text
        assert "Produce" in response.text
        assert response.headers["X-Frame-Options"] == "DENY"

    @pytest.mark.asyncio
    async def test_create_form_renders_upload_widget(self, client, catalogue):
        response = await client.get("/products/create")

        assert response.status_code == 200
        assert '"demo-cloud"' in response.text
        assert '"signed-preset"' in response.text
        assert "Bakery" in response.text
        assert "vegan" in response.text

    @pytest.mark.asyncio
    async def test_create_redirects_and_flashes(self, client, db, catalogue):
        response = await client.post(
            "/products/create",
            data={**form_body(catalogue), "tags": ["2", "5"]},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/products"

        listing = await client.get("/products")
        assert "New Product Plum has been created" in listing.text

        again = await client.get("/products")
        assert "has been created" not in again.text

        product_id = (await db.execute(select(Product.id))).scalar_one()
        assert await TagReconciler(db).current_tag_ids(product_id) == {2, 5}

    @pytest.mark.asyncio
    async def test_invalid_create_rerenders_with_errors(self, client, catalogue):
        response = await client.post("/products/create", data=form_body(catalogue, name="", cost="cheap"))

        assert response.status_code == 200
        assert "This field is required" in response.text
        assert 'value="cheap"' in response.text
        assert "Sweet plum" in response.text

    @pytest.mark.asyncio
    async def test_unstorable_cost_rerenders(self, client, db, catalogue):
        response = await client.post("/products/create", data=form_body(catalogue, cost="9" * 25))

        assert response.status_code == 200
        assert "less than or equal to" in response.text
        assert (await db.execute(select(func.count()).select_from(Product))).scalar_one() == 0

    @pytest.mark.asyncio
    async def test_update_form_preselects_tags(self, client, make_product):
        product = await make_product("Apple", tag_ids=(3,))

        response = await client.get(f"/products/{product.id}/update")

        assert response.status_code == 200
        assert 'value="Apple"' in response.text
        assert '<option value="3" selected>vegan</option>' in response.text
        assert '<option value="1">organic</option>' in response.text

    @pytest.mark.asyncio
    async def test_update_reconciles_tags(self, client, db, catalogue, make_product):
        product = await make_product("Apple", tag_ids=(1, 2, 3))
        product_id = product.id

        response = await client.post(
            f"/products/{product_id}/update",
            data={**form_body(catalogue, name="Red Apple"), "tags": ["2", "3", "4"]},
        )

        assert response.status_code == 303
        assert response.headers["location"] == "/products"
        assert (await db.get(Product, product_id, populate_existing=True)).name == "Red Apple"
        assert await TagReconciler(db).current_tag_ids(product_id) == {2, 3, 4}

    @pytest.mark.asyncio
    async def test_invalid_update_rerenders(self, client, db, catalogue, make_product):
        product = await make_product("Apple", tag_ids=(1,))
        product_id = product.id

        response = await client.post(
            f"/products/{product_id}/update",
            data={**form_body(catalogue, name=""), "tags": ["4"]},
        )

        assert response.status_code == 200
        assert "Edit Apple" in response.text
        assert "This field is required" in response.text
        assert '<option value="4" selected>seasonal</option>' in response.text
        assert await TagReconciler(db).current_tag_ids(product_id) == {1}

    @pytest.mark.asyncio
    async def test_delete_flow(self, client, db, make_product):
        product = await make_product("Apple", tag_ids=(1,))
        product_id = product.id

        confirm = await client.get(f"/products/{product_id}/delete")
        assert confirm.status_code == 200
        assert "Apple" in confirm.text

        response = await client.post(f"/products/{product_id}/delete")

        assert response.status_code == 303
        assert response.headers["location"] == "/products"
        assert await db.get(Product, product_id, populate_existing=True) is None
        assert await TagReconciler(db).current_tag_ids(product_id) == set()

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method, path",
        [
            ("GET", "/products/999/update"),
            ("GET", "/products/999/delete"),
            ("POST", "/products/999/delete"),
        ],
    )
    async def test_missing_product_is_404(self, client, catalogue, method, path):
        response = await client.request(method, path)

        assert response.status_code == 404
        assert "Product 999 not found" in response.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method", ["GET", "POST"])
    @pytest.mark.parametrize("action", ["update", "delete"])
    async def test_out_of_range_product_id_is_404(self, client, catalogue, method, action):
        product_id = "9" * 25

        response = await client.request(method, f"/products/{product_id}/{action}")

        assert response.status_code == 404
        assert f"Product {product_id} not found" in response.text

    @pytest.mark.asyncio
    async def test_update_missing_product_is_404(self, client, catalogue):
        response = await client.post("/products/999/update", data=form_body(catalogue))
        assert response.status_code == 404


class TestStoreFailures:
    """Writes rejected by the store render the error page and roll back."""

    @pytest.mark.asyncio
    async def test_tag_removed_mid_request(self, client, db, catalogue, monkeypatch, caplog):
        attach = TagReconciler.attach

        async def attach_after_tag_removed(self, product_id, tag_ids):
            await self.db.execute(delete(Tag).where(Tag.id == 2))
            return await attach(self, product_id, tag_ids)

        monkeypatch.setattr(TagReconciler, "attach", attach_after_tag_removed)

        response = await client.post("/products/create", data={**form_body(catalogue), "tags": ["2"]})

        assert response.status_code == 500
        assert "Something went wrong" in response.text
        assert "UnknownTagError" in caplog.text
        assert (await db.execute(select(func.count()).select_from(Product))).scalar_one() == 0
        assert await db.get(Tag, 2, populate_existing=True) is not None

    @pytest.mark.asyncio
    async def test_foreign_key_violation(self, client, db, catalogue, make_product, monkeypatch, caplog):
        product = await make_product("Apple", tag_ids=(1,))
        product_id = product.id

        async def attach_missing_tag(self, product_id, tag_ids):
            self.db.add(ProductTag(product_id=product_id, tag_id=99))
            await self.db.flush()
            return [99]

        monkeypatch.setattr(TagReconciler, "attach", attach_missing_tag)

        response = await client.post(
            f"/products/{product_id}/update",
            data={**form_body(catalogue, name="Renamed"), "tags": ["3"]},
        )

        assert response.status_code == 500
        assert "Something went wrong" in response.text
        assert "IntegrityError" in caplog.text
        assert (await db.get(Product, product_id, populate_existing=True)).name == "Apple"
        assert await TagReconciler(db).current_tag_ids(product_id) == {1}


class TestHealth:
    """Test the health endpoint."""

    @pytest.mark.asyncio
    async def test_health_needs_no_login(self, anonymous_client):
        response = await anonymous_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"
