# walkout/utils/extract_line_items.py

import json
from typing import List, Dict, Tuple, Union
from walkout.utils.models import LineItem
from walkout.utils.errors import InvalidInputError, EmptyDataError


def extract_from_office(lines: List[Dict]) -> List[LineItem]:
    """
    Converts office ledger lines ({"Service", "Tooth", "Surface", ...}) into LineItem objects.
    """
    items = []
    for line in lines:
        line = line if isinstance(line, dict) else {}
        items.append(LineItem(
            service_code=_text(line.get("Service")),
            tooth=_text(line.get("Tooth")),
            surface=_text(line.get("Surface")),
            source="office",
            raw=line
        ))
    return items


def extract_from_lc3(lines: List[Dict]) -> List[LineItem]:
    """
    Converts LC3 ledger lines into LineItem objects.
    The LC3 service code is nested under Description.service_code.
    """
    items = []
    for line in lines:
        line = line if isinstance(line, dict) else {}
        description = line.get("Description")
        service_code = description.get("service_code") if isinstance(description, dict) else None
        items.append(LineItem(
            service_code=_text(service_code),
            tooth=_text(line.get("Tooth")),
            surface=_text(line.get("Surface")),
            source="lc3",
            raw=line
        ))
    return items


def decode_payload(payload: Union[str, bytes]) -> Dict:
    try:
        return json.loads(payload)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(str(e))


def get_data_lines(decoded) -> List[Dict]:
    """Returns the non-empty `data` list of a decoded payload or raises EmptyDataError."""
    data = decoded.get("data") if isinstance(decoded, dict) else None
    if not isinstance(data, list) or not data:
        raise EmptyDataError()
    return data


def parse_payloads(office_data: Union[str, bytes], lc3_data: Union[str, bytes]) -> Tuple[List[LineItem], List[LineItem]]:
    """
    Decodes both raw payloads and normalizes them to LineItem lists.

    Raises:
        InvalidInputError: either payload is not valid JSON
        EmptyDataError: either payload has no line items
    """
    office_decoded = decode_payload(office_data)
    lc3_decoded = decode_payload(lc3_data)

    office_lines = get_data_lines(office_decoded)
    lc3_lines = get_data_lines(lc3_decoded)

    return extract_from_office(office_lines), extract_from_lc3(lc3_lines)


def _text(value) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
