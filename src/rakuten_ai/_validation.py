"""Configuration validation utilities."""

import warnings
from typing import Any, Mapping

from typing_extensions import get_type_hints


def validate_config_keys(config_dict: Mapping[str, Any], config_class: type) -> None:
    """Warn about configuration keys that the config class does not declare.

    Args:
        config_dict: Configuration supplied by the caller.
        config_class: TypedDict class declaring the valid keys.
    """
    valid_keys = set(get_type_hints(config_class).keys())
    invalid_keys = set(config_dict.keys()) - valid_keys

    if invalid_keys:
        warnings.warn(
            f"Invalid configuration parameters: {sorted(invalid_keys)}.\nValid parameters are: {sorted(valid_keys)}.",
            stacklevel=4,
        )
