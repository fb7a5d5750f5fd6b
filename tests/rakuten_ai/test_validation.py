import warnings

import pytest
from typing_extensions import TypedDict

from rakuten_ai._validation import validate_config_keys


class ExampleConfig(TypedDict, total=False):
    language: str
    city: str


def test_validate_config_keys_valid():
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        validate_config_keys({"language": "en"}, ExampleConfig)


def test_validate_config_keys_invalid():
    with pytest.warns(UserWarning, match=r"Invalid configuration parameters: \['tone'\]"):
        validate_config_keys({"language": "en", "tone": "polite"}, ExampleConfig)
