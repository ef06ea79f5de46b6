from typing import Any, Optional, Dict
from enum import Enum
import decimal

from pydantic import BaseModel


def json_safe(obj):
    if isinstance(obj, BaseModel):
        return json_safe(obj.model_dump())
    elif isinstance(obj, dict):
        return {k: json_safe(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [json_safe(v) for v in obj]
    elif isinstance(obj, decimal.Decimal):
        return float(obj)
    elif isinstance(obj, Enum):
        return obj.value
    else:
        return obj


def round_money(value: float) -> float:
    """Round half up to 2 decimals, the way the storefront API does."""
    quantized = decimal.Decimal(str(value)).quantize(
        decimal.Decimal("0.01"), rounding=decimal.ROUND_HALF_UP
    )
    return float(quantized)


def standard_response(
    success: bool,
    data: Any = None,
    error: Optional[str] = None
) -> Dict[str, Any]:
    return {
        "success": success,
        "data": json_safe(data),
        "error": error
    }
