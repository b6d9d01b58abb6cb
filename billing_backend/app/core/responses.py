"""
JSON response class used as the application default.

Cost figures can legitimately be NaN or infinite (a zero reading, an
unparsable amount).  JSON has no literal for either, so they are
written as ``null``, which is also what browser clients produce when
they serialise such numbers.
"""

import json
import math
from typing import Any

from fastapi.responses import JSONResponse


def replace_non_finite(value: Any) -> Any:
    """Return ``value`` with every NaN/Infinity float replaced by ``None``."""
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: replace_non_finite(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [replace_non_finite(item) for item in value]
    return value


class BillingJSONResponse(JSONResponse):
    def render(self, content: Any) -> bytes:
        return json.dumps(
            replace_non_finite(content),
            ensure_ascii=False,
            allow_nan=False,
            indent=None,
            separators=(",", ":"),
        ).encode("utf-8")
