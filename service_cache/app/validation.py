"""
Validation of inbound bulk purge requests.
"""

from typing import Any, List

from shared.errors import ValidationError

from .purge.keys import ProductRef

REQUIRED_SKU_FIELDS = ("sku", "storeCode", "storeViewCode")


def parse_bulk_purge_request(data: Any) -> List[ProductRef]:
    """
    Validate a ``{"products": [...]}`` payload and return its product refs.

    An entry is either a path entry (``{"path": ...}``) or a SKU entry, which
    needs ``sku``, ``storeCode`` and ``storeViewCode``; ``urlKey`` is optional.
    """
    if not isinstance(data, dict) or not isinstance(data.get("products"), list):
        raise ValidationError('request body must contain a "products" array')

    products = data["products"]
    if not products:
        raise ValidationError("products array cannot be empty")

    refs = []
    for index, product in enumerate(products):
        if not isinstance(product, dict):
            raise ValidationError("each product must be an object", {"index": index})

        if product.get("path") and not product.get("sku"):
            if not isinstance(product["path"], str) or not product["path"].startswith("/"):
                raise ValidationError('"path" must be an absolute path', {"index": index})
        else:
            for field_name in REQUIRED_SKU_FIELDS:
                if not product.get(field_name):
                    raise ValidationError(
                        f'each product must have a "{field_name}" property',
                        {"index": index},
                    )

        refs.append(ProductRef.from_dict(product))

    return refs
