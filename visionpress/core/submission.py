"""Print-vendor order payloads for rendered workbooks."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from .print_specs import PRODUCT_TYPE_TO_SKU

logger = logging.getLogger(__name__)

DEFAULT_SIZING = "fillPrintArea"
DEFAULT_SHIPPING = "Standard"


@dataclass
class Address:
    line1: str
    town_or_city: str
    postal_or_zip_code: str
    country_code: str
    line2: Optional[str] = None
    state_or_county: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        """Vendor address; optional fields are omitted when blank."""
        data = {
            "line1": self.line1.strip(),
            "postalOrZipCode": self.postal_or_zip_code.strip(),
            "countryCode": self.country_code.strip(),
            "townOrCity": self.town_or_city.strip(),
        }
        if self.line2 and self.line2.strip():
            data["line2"] = self.line2.strip()
        if self.state_or_county and self.state_or_county.strip():
            data["stateOrCounty"] = self.state_or_county.strip()
        return data


@dataclass
class Recipient:
    name: str
    address: Address

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipient":
        addr = data.get("address") or {}
        return cls(
            name=data.get("name", ""),
            address=Address(
                line1=addr.get("line1", ""),
                line2=addr.get("line2"),
                town_or_city=addr.get("townOrCity", ""),
                state_or_county=addr.get("stateOrCounty"),
                postal_or_zip_code=addr.get("postalOrZipCode", ""),
                country_code=addr.get("countryCode", ""),
            ),
        )


def is_canvas_sku(sku: str) -> bool:
    return "-CAN-" in sku or sku.startswith("GLOBAL-CAN")


def sku_for_edition(edition: str) -> Optional[str]:
    return PRODUCT_TYPE_TO_SKU.get(edition)


def build_submission_payload(idempotency_key: str, recipient: Recipient, sku: str, asset_urls: List[str],
                             copies: int = 1, sizing: str = DEFAULT_SIZING,
                             finish: str = "matte") -> Dict[str, Any]:
    """
    Build an order payload for the print vendor.

    Args:
        idempotency_key: Order id; also used as the merchant reference
        recipient: Shipping recipient
        sku: Vendor product code
        asset_urls: Hosted URLs of the rendered artifact(s)
        copies: Number of copies
        sizing: Vendor sizing mode
        finish: Paper finish for non-canvas products

    Returns:
        JSON-serializable payload dictionary
    """
    if not asset_urls:
        raise ValueError("At least one asset URL is required")
    if copies < 1:
        raise ValueError(f"copies must be at least 1, got {copies}")

    item: Dict[str, Any] = {
        "sku": sku,
        "copies": copies,
        "sizing": sizing,
        "assets": [{"printArea": "default", "url": url} for url in asset_urls],
    }
    # Canvas products need a wrap attribute instead of a finish
    if is_canvas_sku(sku):
        item["attributes"] = {"wrap": "MirrorWrap"}
    else:
        item["attributes"] = {"finish": finish}

    logger.debug(f"Built submission payload for {idempotency_key} ({sku} x{copies})")
    return {
        "idempotencyKey": idempotency_key,
        "merchantReference": idempotency_key,
        "shippingMethod": DEFAULT_SHIPPING,
        "recipient": {"name": recipient.name.strip(), "address": recipient.address.to_dict()},
        "items": [item],
    }
