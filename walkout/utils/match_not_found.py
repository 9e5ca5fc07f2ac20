# walkout/utils/match_not_found.py

from typing import List
from walkout.utils.models import LineItem, MatchRecord


def collect_not_found(office: List[LineItem]) -> List[MatchRecord]:
    """
    Carries every still-unmatched office item forward as a not-found record.
    Tooth/Surface are kept for audit display (None when absent).
    """
    return [MatchRecord(
        service=item.service_code,
        service_match=False,
        tooth_surface_match=False,
        match=False,
        tooth=item.tooth or None,
        surface=item.surface or None
    ) for item in office]
