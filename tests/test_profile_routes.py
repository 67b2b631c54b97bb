"""API tests for /api/profile."""

from merchant_app.routes.profile import (
    ProfileUpdateRequest,
    build_profile_update,
    merge_street_lines,
    parse_street_lines,
)
from merchant_app.storage import MAX_LOGO_BYTES


class TestStreetLines:
    def test_parse(self):
        assert parse_street_lines("Calle Mayor 1\n  Piso 2 \n") == {
            "street_line1": "Calle Mayor 1",
            "street_line2": "Piso 2",
        }

    def test_parse_empty(self):
        assert parse_street_lines(None) == {"street_line1": "", "street_line2": ""}

    def test_merge(self):
        assert merge_street_lines("Calle Mayor 1", " ") == "Calle Mayor 1"
        assert merge_street_lines("", "") is None


class TestBuildProfileUpdate:
    def test_only_existing_address_columns(self):
        data = ProfileUpdateRequest(
            name=" Cafe Roma ", vat_number="es b1234567-8", street_line1="Gran Via 2",
            city="Madrid", contact_email="hola@caferoma.es",
        )
        fields = build_profile_update(data, {"id": 42, "street": None, "city": None})
        assert fields["name"] == "Cafe Roma"
        assert fields["vat_number"] == "ESB12345678"
        assert fields["street"] == "Gran Via 2"
        assert fields["city"] == "Madrid"
        assert "contact_email" not in fields
        assert "postal_code" not in fields

    def test_instagram_handle_sanitized(self):
        data = ProfileUpdateRequest(name="Cafe Roma", instagram_handle=" @<caferoma> ")
        assert build_profile_update(data, {"id": 42})["instagram_handle"] == "caferoma"

        blank = ProfileUpdateRequest(name="Cafe Roma", instagram_handle="  ")
        assert build_profile_update(blank, {"id": 42})["instagram_handle"] is None

    def test_blank_values_cleared(self):
        data = ProfileUpdateRequest(name="Cafe Roma", legal_name="  ", vat_number="")
        fields = build_profile_update(data, {"id": 42})
        assert fields["legal_name"] is None
        assert fields["vat_number"] is None


class TestProfileEndpoints:
    def test_get_profile(self, client):
        response = client.get("/api/profile")
        assert response.status_code == 200
        profile = response.json()["profile"]
        assert profile["name"] == "Cafe Roma"
        assert profile["street_line1"] == "Calle Mayor 1"
        assert profile["street_line2"] == "Piso 2"
        assert profile["logo_signed_url"] is None

    def test_get_profile_signs_stored_logo(self, client, merchant_row):
        merchant_row["logo_url"] = "42/1-abc.png"
        profile = client.get("/api/profile").json()["profile"]
        assert profile["logo_signed_url"].startswith("https://storage.test/merchant-logos/42/1-abc.png")

    def test_update_profile(self, client, merchant_row):
        response = client.put("/api/profile", json={
            "name": "Cafe Roma Centro",
            "vat_number": "ESB12345678",
            "street_line1": "Gran Via 2",
            "street_line2": "",
            "city": "Madrid",
        })
        assert response.status_code == 200
        assert merchant_row["name"] == "Cafe Roma Centro"
        assert merchant_row["street"] == "Gran Via 2"
        assert response.json()["profile"]["street_line1"] == "Gran Via 2"

    def test_update_profile_invalid(self, client, merchant_row):
        response = client.put("/api/profile", json={"name": "X", "vat_number": "DE12"})
        assert response.status_code == 422
        errors = response.json()["detail"]["errors"]
        assert set(errors) == {"name", "vat_number"}
        assert merchant_row["name"] == "Cafe Roma"


class TestLogoUpload:
    def test_upload(self, client, fake_supabase, merchant_row):
        response = client.post(
            "/api/profile/logo",
            files={"file": ("logo.png", b"\x89PNG\r\n", "image/png")},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["logo_url"].startswith("42/")
        assert merchant_row["logo_url"] == body["logo_url"]
        assert len(fake_supabase.storage.uploads) == 1

    def test_rejects_type(self, client):
        response = client.post(
            "/api/profile/logo",
            files={"file": ("logo.pdf", b"%PDF", "application/pdf")},
        )
        assert response.status_code == 415

    def test_rejects_empty(self, client):
        response = client.post("/api/profile/logo", files={"file": ("logo.png", b"", "image/png")})
        assert response.status_code == 400

    def test_rejects_large(self, client):
        response = client.post(
            "/api/profile/logo",
            files={"file": ("logo.png", b"0" * (MAX_LOGO_BYTES + 1), "image/png")},
        )
        assert response.status_code == 413

    def test_storage_failure(self, client, fake_supabase):
        fake_supabase.storage.fail = True
        response = client.post("/api/profile/logo", files={"file": ("logo.png", b"x", "image/png")})
        assert response.status_code == 500
