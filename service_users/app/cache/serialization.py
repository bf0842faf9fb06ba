"""
JSON value codec for Redis-backed caches.

Pydantic models are stored with a type tag so they come back as the same
type. Only registered model classes are decoded; an unknown tag is rejected
before any lookup beyond the registry. Everything else must be plain JSON,
with these limits:

- tuples come back as lists
- dict keys must be strings
- a dict may not carry the reserved ``@class`` key
"""

import json
from typing import Any, Dict, Type

from pydantic import BaseModel

from ..models import User

CLASS_TAG = "@class"
VALUE_TAG = "@value"

_MODEL_TYPES: Dict[str, Type[BaseModel]] = {}


def register_model(model_cls: Type[BaseModel]) -> Type[BaseModel]:
    """Allow ``model_cls`` to be stored in and read back from the cache."""
    if not (isinstance(model_cls, type) and issubclass(model_cls, BaseModel)):
        raise TypeError(f"{model_cls!r} is not a pydantic model")
    _MODEL_TYPES[model_cls.__name__] = model_cls
    return model_cls


register_model(User)


def _encode(value: Any) -> Any:
    if isinstance(value, BaseModel):
        cls = type(value)
        if _MODEL_TYPES.get(cls.__name__) is not cls:
            raise TypeError(f"Model {cls.__name__} is not registered for caching")
        return {CLASS_TAG: cls.__name__, VALUE_TAG: value.model_dump(mode="json")}
    if isinstance(value, (list, tuple)):
        return [_encode(item) for item in value]
    if isinstance(value, dict):
        if CLASS_TAG in value:
            raise ValueError(f"Dict key '{CLASS_TAG}' is reserved for model values")
        for k in value:
            if not isinstance(k, str):
                raise TypeError(f"Dict keys must be strings, got {type(k).__name__}")
        return {k: _encode(v) for k, v in value.items()}
    return value


def _decode(data: Any) -> Any:
    if isinstance(data, list):
        return [_decode(item) for item in data]
    if isinstance(data, dict):
        if CLASS_TAG in data:
            model_cls = _MODEL_TYPES.get(data[CLASS_TAG])
            if model_cls is None:
                raise ValueError(f"Unknown cached model type: {data[CLASS_TAG]!r}")
            return model_cls.model_validate(data.get(VALUE_TAG, {}))
        return {k: _decode(v) for k, v in data.items()}
    return data


def dumps(value: Any) -> str:
    """Serialize a cache value to a JSON string."""
    return json.dumps(_encode(value))


def loads(raw: Any) -> Any:
    """Deserialize a JSON string (or bytes) produced by ``dumps``."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8")
    return _decode(json.loads(raw))
