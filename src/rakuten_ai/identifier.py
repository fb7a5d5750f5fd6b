"""Device identifier utilities."""

import random
import string
import uuid

_BASE36 = string.digits + string.ascii_lowercase


def generate_device_id() -> str:
    """Generate a new device identifier.

    The backend expects a uuid followed by a short lowercase base36 suffix.

    Returns:
        Device identifier such as `0f8c...-k3z9qa`.
    """
    suffix = "".join(random.choices(_BASE36, k=6))
    return f"{uuid.uuid4()}-{suffix}"
