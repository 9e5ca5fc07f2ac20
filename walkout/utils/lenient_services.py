# walkout/utils/lenient_services.py

import json
from typing import Set
from walkout.config import settings
from walkout.utils.errors import LenientServicesError


def load_lenient_services(path: str = None) -> Set[str]:
    """
    Loads the service codes exempt from tooth/surface agreement.

    A missing, unreadable or malformed file raises LenientServicesError
    rather than falling back to an empty set.
    """
    path = path or settings.LENIENT_SERVICES_PATH
    try:
        with open(path, 'r') as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise LenientServicesError(f"{path}: {e}")

    codes = data.get("lenient_services") if isinstance(data, dict) else None
    if not isinstance(codes, list):
        raise LenientServicesError(f"{path}: expected a 'lenient_services' list")
    return set(codes)
