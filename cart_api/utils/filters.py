from typing import Optional, List, Any, Dict


RESPONSE_PRESETS: Dict[str, List[str]] = {
    "mini": [
        "currency", "items.item_key", "items.title", "items.price",
        "items.quantity.value", "items.featured_image", "totals.subtotal",
    ],
    "digital": [
        "currency", "customer.billing_address", "items.item_key", "items.id",
        "items.name", "items.title", "items.price", "items.quantity",
        "items.totals", "items.slug", "items.meta.product_type", "items.meta.sku",
        "items.meta.variation", "items.cart_item_data", "items.featured_image",
        "items.extensions", "coupons", "needs_payment", "taxes", "totals", "notices",
    ],
    "digital_fees": [
        "currency", "customer.billing_address", "items.item_key", "items.id",
        "items.name", "items.title", "items.price", "items.quantity",
        "items.totals", "items.slug", "items.meta.product_type", "items.meta.sku",
        "items.variation", "items.cart_item_data", "items.featured_image",
        "items.extensions", "coupons", "needs_payment", "fees", "taxes", "totals",
        "notices",
    ],
    "shipping": [
        "currency", "customer", "items", "items_weight", "coupons", "needs_payment",
        "needs_shipping", "shipping", "taxes", "totals", "notices",
    ],
    "shipping_fees": [
        "currency", "customer", "items", "items_weight", "coupons", "needs_payment",
        "needs_shipping", "shipping", "fees", "taxes", "totals", "notices",
    ],
    "removed_items": ["currency", "removed_items", "notices"],
    "cross_sells": ["currency", "cross_sells", "notices"],
}


def parse_field_list(value: Optional[str]) -> List[str]:
    """
    Parse a comma-separated field list, keeping order and dropping blanks.

    Args:
        value: Comma-separated list of fields, dot notation for nested keys

    Returns:
        List of field names
    """
    if not value:
        return []

    fields: List[str] = []
    for field in value.split(","):
        field = field.strip()
        if field and field not in fields:
            fields.append(field)

    return fields


def get_response_fields(preset: Optional[str]) -> List[str]:
    """Fields for a named response preset, or an empty list if unknown."""
    return list(RESPONSE_PRESETS.get((preset or "").strip(), []))


def _split_nested(fields: List[str], key: str) -> List[str]:
    return [f.split(".", 1)[1] for f in fields if f.startswith(f"{key}.")]


def include_fields(data: Any, fields: List[str]) -> Any:
    """
    Keep only the requested fields of a payload.

    A requested field is kept when its top-level key exists; "items.title"
    keeps the "title" key of every dict in the "items" list.
    """
    if not fields:
        return data

    if isinstance(data, list):
        return [include_fields(item, fields) for item in data]
    if not isinstance(data, dict):
        return data

    top_level = {f.split(".", 1)[0] for f in fields}

    result = {}
    for key, value in data.items():
        if key not in top_level:
            continue
        if key in fields:
            result[key] = value
            continue
        result[key] = include_fields(value, _split_nested(fields, key))

    return result


def exclude_fields(data: Any, fields: List[str]) -> Any:
    """Remove the listed fields of a payload, dot notation for nested keys."""
    if not fields:
        return data

    if isinstance(data, list):
        return [exclude_fields(item, fields) for item in data]
    if not isinstance(data, dict):
        return data

    result = {}
    for key, value in data.items():
        if key in fields:
            continue
        nested = _split_nested(fields, key)
        result[key] = exclude_fields(value, nested) if nested else value

    return result


class FieldsFilter:
    """Helper class to parse and apply fields/exclude_fields/response filtering."""

    def __init__(
        self,
        fields: Optional[str] = None,
        exclude: Optional[str] = None,
        response: Optional[str] = None,
    ):
        self.fields = parse_field_list(fields) or get_response_fields(response)
        self.excluded = parse_field_list(exclude)

    def filter(self, data: Any) -> Any:
        """Filter data based on the requested fields."""
        return exclude_fields(include_fields(data, self.fields), self.excluded)
