from src.discovery import categories


def test_service_catalogue_values_are_unique():
    values = [category.value for category in categories.SERVICE_CATEGORIES]
    assert len(values) == 16
    assert len(set(values)) == len(values)


def test_get_service_category():
    assert categories.get_service_category("chain").label == "Chain & Sprocket"
    assert categories.get_service_category("warp_drive") is None
    assert categories.get_service_category(None) is None


def test_get_country_name():
    assert categories.get_country_name("se") == "Sweden"
    assert categories.get_country_name("GB") == "United Kingdom"
    assert categories.get_country_name("XX") == "XX"
