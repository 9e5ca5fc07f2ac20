# walkout/utils/loader.py

import os
import json
from typing import Tuple, Dict, Any
from walkout.utils import s3_utils
from walkout.config.settings import WALKOUT_INPUT_PREFIX
from walkout.utils.errors import MissingExtractionError


def load_walkout_from_s3(file_name: str) -> Dict[str, Any]:
    """
    Loads a stored walkout document from S3 using the key: WALKOUT_INPUT_PREFIX + file_name
    """
    s3_key = os.path.join(WALKOUT_INPUT_PREFIX, file_name)
    return s3_utils.get_s3_json(s3_key)


def extract_walkout_payloads(data: Dict[str, Any]) -> Tuple[str, str]:
    """
    Pulls the office and LC3 extraction payloads out of a walkout document.

    Both are normally stored as JSON strings by the extraction step; decoded
    objects are re-encoded so the parser always receives text.
    """
    office_data = (data.get("officeWalkoutSnip") or {}).get("extractedData")
    lc3_data = (data.get("lc3WalkoutImage") or {}).get("extractedData")

    if not office_data:
        raise MissingExtractionError("Office")
    if not lc3_data:
        raise MissingExtractionError("LC3")

    return _as_json_text(office_data), _as_json_text(lc3_data)


def _as_json_text(payload):
    if isinstance(payload, (dict, list)):
        return json.dumps(payload)
    return payload
