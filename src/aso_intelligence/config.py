"""Environment-driven defaults for sessions created by the server and helpers.

ASO_STORE         default marketplace, "gplay" or "itunes" (default gplay)
ASO_COUNTRY       ISO region code (default us)
ASO_LANGUAGE      locale code (default en)
ASO_THROTTLE_MS   minimum milliseconds between requests (default 20)
ASO_TIMEOUT_MS    per-request timeout hint (default 10000)
ASO_CACHE         accepted and ignored; response caching is not implemented
"""

from __future__ import annotations

import os
from typing import Any

from .core.models import StoreConfig, StoreType
from .core.stores import get_profile

DEFAULT_STORE = StoreType.GPLAY

_ENV_FIELDS = {
    "country": "ASO_COUNTRY",
    "language": "ASO_LANGUAGE",
    "throttle": "ASO_THROTTLE_MS",
    "timeout": "ASO_TIMEOUT_MS",
    "cache": "ASO_CACHE",
}


def get_default_store() -> StoreType:
    return get_profile(os.environ.get("ASO_STORE", DEFAULT_STORE.value).lower()).store


def load_config(**overrides: Any) -> StoreConfig:
    """Build a StoreConfig from defaults, then environment, then ``overrides``.

    ``None`` overrides are ignored so callers can pass optional arguments through.
    """
    values: dict[str, Any] = {}
    for field, env_var in _ENV_FIELDS.items():
        raw = os.environ.get(env_var)
        if raw:
            values[field] = raw
    values.update({k: v for k, v in overrides.items() if v is not None})
    return StoreConfig.model_validate(values)
