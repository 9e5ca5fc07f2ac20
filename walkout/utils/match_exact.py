# walkout/utils/match_exact.py

from typing import List, Tuple
from walkout.utils.models import LineItem, MatchRecord
from walkout.utils.composite_key import item_key


def match_exact(office: List[LineItem], lc3: List[LineItem], pool: List[int]) -> Tuple[List[MatchRecord], List[LineItem], List[int]]:
    """
    Matches office items to LC3 items on service code + composite key.
    One-to-one, greedy matching in office order: each office item takes the
    first pool entry that agrees on both.

    `pool` holds indices into `lc3` that are still available; it is not modified.

    Returns:
        (matches, remaining_office, remaining_pool)
    """
    matches = []
    remaining_office = []
    remaining_pool = list(pool)

    for office_item in office:
        key = item_key(office_item)
        hit = None
        for idx in remaining_pool:
            lc3_item = lc3[idx]
            if lc3_item.service_code == office_item.service_code and item_key(lc3_item) == key:
                hit = idx
                break

        if hit is None:
            remaining_office.append(office_item)
            continue

        matches.append(MatchRecord(
            service=office_item.service_code,
            service_match=True,
            tooth_surface_match=True,
            match=True
        ))
        remaining_pool.remove(hit)

    return matches, remaining_office, remaining_pool
