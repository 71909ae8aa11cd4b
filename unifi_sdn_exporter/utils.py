"""
Utility functions for the UniFi SDN exporter package.
"""

import inspect
import json
import os
import dataclasses
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Type, Optional, Tuple, TypeVar

from .logging import get_logger, log_extra_fields
from .exceptions import UnifiDataError, UnifiModelError

logger = get_logger(__name__)

T = TypeVar("T")

DEFAULT_MODEL_DB_PATH = os.path.join(os.path.dirname(__file__), "device-models.json")


def get_api_field_mapping(model_class: Type) -> Dict[str, str]:
    """
    Create a mapping between API field names and model attribute names.

    Examines dataclass fields with metadata to find mappings between
    API field names (like 'model_in_lts') and Python attribute names (like 'lts').

    Args:
        model_class: The dataclass model to examine for field mappings

    Returns:
        Dictionary mapping UniFi API field names to Python model attribute names
    """
    if not dataclasses.is_dataclass(model_class):
        return {}

    field_mapping = {}

    for field in dataclasses.fields(model_class):
        if "unifi_api_field" in field.metadata:
            api_field_name = field.metadata["unifi_api_field"]
            field_mapping[api_field_name] = field.name

    return field_mapping


def map_api_data_to_model(
    data: Dict[str, Any], model_class: Type
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """
    Maps API data to model fields, separating model fields from extra fields.

    Args:
        data: Input dictionary from API response
        model_class: The dataclass model to map data to

    Returns:
        Tuple containing (model_fields, extra_fields) where:
            - model_fields: Dictionary of fields that map to the model's attributes
            - extra_fields: Dictionary of extra fields that don't directly map to the model
    """
    signature = inspect.signature(model_class.__init__)
    valid_params = set(signature.parameters.keys())
    valid_params.discard("self")
    valid_params.discard("_extra_fields")

    field_map = get_api_field_mapping(model_class)

    model_fields = {}
    extra_fields = {}

    for api_key, value in data.items():
        mapped_key = None

        if api_key in field_map and field_map[api_key] in valid_params:
            mapped_key = field_map[api_key]
        elif api_key in valid_params:
            mapped_key = api_key

        if mapped_key is not None:
            model_fields[mapped_key] = value
        else:
            extra_fields[api_key] = value

    return model_fields, extra_fields


def decode_models(
    data: Any, model_class: Type[T], uri: str, id_field: Optional[str] = None
) -> List[T]:
    """
    Decode an API ``data`` payload into a list of model instances.

    Args:
        data: The ``data`` member of a response envelope.
        model_class: Dataclass to build for each element.
        uri: Requested URI, used in error messages.
        id_field: Field used to identify objects when logging unmapped fields.

    Returns:
        One model instance per element of ``data``.

    Raises:
        UnifiDataError: If the payload is not a list of objects, or an element
                        cannot be mapped to the model.
    """
    if not isinstance(data, list):
        error_msg = f"Unexpected payload for {uri}: expected a list, got {type(data).__name__}"
        logger.error(error_msg)
        raise UnifiDataError(error_msg)

    results = []
    for item in data:
        if not isinstance(item, dict):
            error_msg = f"Unexpected element in payload for {uri}: {type(item).__name__}"
            logger.error(error_msg)
            raise UnifiDataError(error_msg)

        model_fields, extra_fields = map_api_data_to_model(item, model_class)
        try:
            obj = model_class(**model_fields, _extra_fields=extra_fields)
        except (TypeError, ValueError) as e:
            error_msg = f"Error creating {model_class.__name__} model from {uri}: {e}"
            logger.error(error_msg)
            raise UnifiDataError(error_msg) from e

        obj_id = str(item.get(id_field, "?")) if id_field else "?"
        log_extra_fields(logger, model_class.__name__, obj_id, extra_fields)
        results.append(obj)

    return results


@lru_cache(maxsize=None)
def load_device_models(model_db_path: str = DEFAULT_MODEL_DB_PATH) -> Mapping[str, str]:
    """
    Load the device model database, mapping model codes to product names.

    The file is read once per process and path; the result is read-only.

    Args:
        model_db_path: Path to the device model database JSON file.

    Returns:
        Read-only mapping of short model code to full product name.

    Raises:
        UnifiModelError: If the device model database cannot be loaded.
    """
    logger.debug(f"Loading device models from {model_db_path}")
    try:
        with open(model_db_path, "r", encoding="utf-8") as file:
            device_models = json.load(file)
    except (json.JSONDecodeError, IOError) as e:
        error_msg = f"Failed to load device models from {model_db_path}: {e}"
        logger.error(error_msg)
        raise UnifiModelError(error_msg) from e

    names = {}
    for code, details in device_models.items():
        full_name = details.get("names", {}).get("fullName")
        if full_name:
            names[code] = full_name
    return MappingProxyType(names)
