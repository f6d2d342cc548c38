import argparse
import json

import pytest

from src.core import config
from src.core.db import ShopStoreError
from src.core.models import ServiceOffering, Shop
from src.discovery.engine import ShopDiscoveryEngine
from src.discovery.repository import InMemoryShopRepository
from src.jobs import find_shops


@pytest.fixture(autouse=True)
def clear_settings(monkeypatch):
    config.get_settings.cache_clear()
    for name in ("DEFAULT_RADIUS_KM", "DEFAULT_RESULT_LIMIT", "MAX_RESULT_LIMIT"):
        monkeypatch.delenv(name, raising=False)
    yield
    config.get_settings.cache_clear()


@pytest.fixture
def engine(monkeypatch):
    shops = [
        Shop(id="sthlm", name="Moto Fix", city="Stockholm", country="Sweden",
             latitude=59.3293, longitude=18.0686, rating=4.5, email="fix@moto.se"),
        Shop(id="solna", name="Solna MC", city="Solna", country="Sweden",
             latitude=59.3600, longitude=18.0000, rating=None),
    ]
    offerings = [ServiceOffering(shop_id="sthlm", service_category="brake")]
    engine = ShopDiscoveryEngine(InMemoryShopRepository(shops, offerings))
    monkeypatch.setattr(find_shops, "build_engine", lambda: engine)
    return engine


def test_build_parser_defaults():
    parser = find_shops.build_parser()
    args = parser.parse_args(["nearby", "--lat", "59.3", "--lon", "18.0"])

    assert isinstance(parser, argparse.ArgumentParser)
    assert args.command == "nearby"
    assert args.radius == 50.0
    assert args.limit == 20
    assert args.service is None
    assert args.json is False
    assert args.with_email is False


def test_nearby_prints_ranked_lines(engine, capsys):
    exit_code = find_shops.main(["nearby", "--lat", "59.3293", "--lon", "18.0686"])

    out = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert out[0] == "2 shops for any service within 50 km"
    assert out[1].strip() == "0 m   4.5  Moto Fix (Stockholm, Sweden)"
    assert "Solna MC" in out[2]


def test_nearby_json_with_service_label(engine, capsys):
    exit_code = find_shops.main(["nearby", "--lat", "59.3293", "--lon", "18.0686", "--service", "brake", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [item["id"] for item in payload] == ["sthlm"]
    assert payload[0]["offers_service"] is True


def test_nearby_rejects_invalid_coordinates(engine):
    assert find_shops.main(["nearby", "--lat", "120", "--lon", "18.0686"]) == 2


@pytest.mark.parametrize("radius", ["nan", "inf", "-5"])
def test_nearby_rejects_unusable_radius(engine, radius, capsys):
    assert find_shops.main(["nearby", "--lat", "59.3293", "--lon", "18.0686", "--radius", radius]) == 2
    assert capsys.readouterr().out == ""


def test_nearby_with_email_filter(engine, capsys):
    exit_code = find_shops.main(["nearby", "--lat", "59.3293", "--lon", "18.0686", "--with-email", "--json"])

    payload = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [item["id"] for item in payload] == ["sthlm"]


def test_countries_json(engine, capsys):
    assert find_shops.main(["countries", "--json"]) == 0
    assert json.loads(capsys.readouterr().out) == [{"country": "Sweden", "shop_count": 2}]


def test_countries(engine, capsys):
    exit_code = find_shops.main(["countries"])

    out = capsys.readouterr().out.splitlines()
    assert exit_code == 0
    assert out == ["     2  Sweden"]


def test_store_failure_exit_code(monkeypatch):
    class BrokenEngine:
        def list_shop_countries(self):
            raise ShopStoreError("down")

    monkeypatch.setattr(find_shops, "build_engine", lambda: BrokenEngine())

    assert find_shops.main(["countries"]) == 1
