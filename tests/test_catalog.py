from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from medfinder import db as db_module
from medfinder.models import Base, Medicine, MedicineInventory
from scripts import seed_catalog
from scripts.seed_catalog import SAMPLE_PATH, load_catalog, sync_catalog
from tests.utils.auth import anon_headers

NYC = {"lat": 40.7128, "lng": -74.0060}


def _medicine(client, name):
    resp = client.get("/v1/medicines/search", params={"q": name}, headers=anon_headers())
    assert resp.status_code == 200
    return next(m for m in resp.json() if m["name"] == name)


def _pharmacy(client, name):
    resp = client.get("/v1/pharmacies/search", params={"q": name}, headers=anon_headers())
    assert resp.status_code == 200
    return next(p for p in resp.json() if p["name"] == name)


def test_medicine_detail(client):
    aspirin = _medicine(client, "Aspirin")
    resp = client.get(f"/v1/medicines/{aspirin['id']}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["manufacturer"] == "Bayer"
    assert body["genericName"] == "Acetylsalicylic acid"


def test_unknown_medicine_is_404(client):
    resp = client.get("/v1/medicines/does-not-exist")
    assert resp.status_code == 404
    assert resp.json() == {"code": "NOT_FOUND", "message": "Medicine not found"}


def test_pharmacy_detail(client):
    harbor = _pharmacy(client, "Harbor Pharmacy")
    resp = client.get(f"/v1/pharmacies/{harbor['id']}")
    assert resp.status_code == 200
    body = resp.json()
    assert body["address"] == "12 Water St"
    assert body["reviewCount"] == 76
    assert body["isOpen"] is True


def test_unknown_pharmacy_is_404(client):
    resp = client.get("/v1/pharmacies/nope")
    assert resp.status_code == 404
    assert resp.json() == {"code": "NOT_FOUND", "message": "Pharmacy not found"}


def test_availability_nearest_first_in_stock_only(client):
    aspirin = _medicine(client, "Aspirin")
    resp = client.get(f"/v1/medicines/{aspirin['id']}/availability", params=NYC)
    assert resp.status_code == 200
    rows = resp.json()
    assert [r["pharmacy"]["name"] for r in rows] == [
        "HealthPlus Pharmacy",
        "Harbor Pharmacy",
        "Express Meds",
    ]
    assert all(r["stock"] > 0 for r in rows)
    assert rows[0]["price"] == 4.99
    assert rows[0]["medicine"]["name"] == "Aspirin"


def test_availability_without_location(client):
    aspirin = _medicine(client, "Aspirin")
    resp = client.get(f"/v1/medicines/{aspirin['id']}/availability")
    assert resp.status_code == 200
    assert len(resp.json()) == 3


def test_availability_for_unknown_medicine(client):
    resp = client.get("/v1/medicines/missing/availability")
    assert resp.status_code == 404


def test_medicine_search_requires_query(client):
    resp = client.get("/v1/medicines/search", headers=anon_headers())
    assert resp.status_code == 400
    assert resp.json()["code"] == "BAD_REQUEST"


def test_pharmacy_search_empty_query_lists_all(client):
    resp = client.get("/v1/pharmacies/search", headers=anon_headers())
    assert resp.status_code == 200
    assert len(resp.json()) == 8


def test_pharmacy_search_by_address(client):
    resp = client.get("/v1/pharmacies/search", params={"q": "oak ave"}, headers=anon_headers())
    assert [p["name"] for p in resp.json()] == ["MediCare Central"]


def test_seed_is_idempotent(apply_migrations):
    with db_module.SessionLocal() as session:
        before = session.query(Medicine).count(), session.query(MedicineInventory).count()
        stats = sync_catalog(load_catalog(SAMPLE_PATH), session)
        after = session.query(Medicine).count(), session.query(MedicineInventory).count()
    assert before == after
    assert stats["medicines"] == {"inserted": 0, "updated": 10}
    assert stats["pharmacies"] == {"inserted": 0, "updated": 8}
    assert stats["inventory"] == {"upserted": 10, "skipped": 0}


def test_seed_skips_unknown_inventory_refs(apply_migrations):
    catalog = {
        "medicines": [],
        "pharmacies": [],
        "inventory": [{"medicine": "Unobtainium", "pharmacy": "Nowhere", "price": 1, "stock": 1}],
    }
    with db_module.SessionLocal() as session:
        stats = sync_catalog(catalog, session)
    assert stats["inventory"] == {"upserted": 0, "skipped": 1}


def test_seed_script_defaults_to_app_database(tmp_path, monkeypatch):
    url = f"sqlite:///{tmp_path / 'seed.db'}"
    engine = create_engine(url)
    Base.metadata.create_all(engine)
    monkeypatch.setenv("DATABASE_URL", url)

    seed_catalog.main([])

    with sessionmaker(bind=engine)() as session:
        assert session.query(Medicine).count() == 10
        assert session.query(MedicineInventory).count() == 10
    engine.dispose()
