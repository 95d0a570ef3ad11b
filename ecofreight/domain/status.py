from typing import Optional

STATUS_BADGES = {
    "processing": {"label": "Processing", "color": "yellow"},
    "in-transit": {"label": "In Transit", "color": "blue"},
    "delivered": {"label": "Delivered", "color": "green"},
    "delayed": {"label": "Delayed", "color": "red"},
}

GENERIC_COLOR = "gray"

def status_badge(status: Optional[str]) -> dict:
    """Display label and color for a shipment status; unknown values get a gray badge."""
    badge = STATUS_BADGES.get(status) if isinstance(status, str) else None
    if badge:
        return {"status": status, **badge}
    if isinstance(status, str) and status.strip():
        label = status.strip().replace("-", " ").replace("_", " ").title()
    else:
        label = "Unknown"
    return {"status": status, "label": label, "color": GENERIC_COLOR}
