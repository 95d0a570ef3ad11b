import pytest
from ecofreight.domain.status import status_badge

@pytest.mark.parametrize("status,label,color", [
    ("processing", "Processing", "yellow"),
    ("in-transit", "In Transit", "blue"),
    ("delivered", "Delivered", "green"),
    ("delayed", "Delayed", "red"),
])
def test_known_statuses(status, label, color):
    assert status_badge(status) == {"status": status, "label": label, "color": color}

@pytest.mark.parametrize("value", ["cancelled", "on_hold", "", "   ", None, 42, ["delivered"]])
def test_unknown_values_get_generic_badge(value):
    badge = status_badge(value)
    assert badge["color"] == "gray"
    assert isinstance(badge["label"], str) and badge["label"]

def test_unknown_status_label_is_readable():
    assert status_badge("on_hold")["label"] == "On Hold"
    assert status_badge(None)["label"] == "Unknown"
