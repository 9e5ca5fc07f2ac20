# walkout/utils/match_compatible.py

import logging
from typing import Dict, List, Set, Tuple
from walkout.utils.models import LineItem, MatchRecord, RuleSet
from walkout.utils.composite_key import item_key

logger = logging.getLogger(__name__)

COMPATIBLE_MATCH_TYPE = "compatible"


def group_by_service(items: List[LineItem]) -> Dict[str, List[LineItem]]:
    """Groups items by service code, keeping first-encountered group order."""
    grouped = {}
    for item in items:
        grouped.setdefault(item.service_code, []).append(item)
    return grouped


def score_pair(svc: str, candidate: LineItem, office_item: LineItem, rules: RuleSet) -> Tuple[int, bool]:
    """
    Scores one (candidate, office item) pair for service group `svc`.

    1 for a direct code match or a permitted substitution, +1 when the
    composite keys agree. A substitution blocked by the rule's tooth/surface
    filter scores 0.

    Returns:
        (score, comp_ok)
    """
    if candidate.service_code != svc:
        rule = rules.compatibility.get(svc)
        if rule is None or not rule.allows(office_item):
            return 0, False

    comp_ok = item_key(candidate) == item_key(office_item)
    return 1 + (1 if comp_ok else 0), comp_ok


def match_compatible(
    office: List[LineItem],
    lc3: List[LineItem],
    pool: List[int],
    rules: RuleSet,
    lenient_services: Set[str]
) -> Tuple[List[MatchRecord], List[LineItem], List[int]]:
    """
    Greedy partial matching per service group, allowing compatible-code substitutions.

    For each group, repeatedly picks the highest scoring (candidate, office item)
    pair. Ties go to the first generated pair: candidates in pool order on the
    outside, office items in group order on the inside.

    Returns:
        (matches, remaining_office, remaining_pool)
    """
    matches = []
    consumed = set()
    remaining_pool = list(pool)

    for svc, pending in group_by_service(office).items():
        pending = list(pending)
        acceptable = {svc} | set(rules.compatible_codes(svc))

        while pending:
            candidates = [idx for idx in remaining_pool if lc3[idx].service_code in acceptable]
            if not candidates:
                break

            best = None
            for idx in candidates:
                for office_item in pending:
                    score, comp_ok = score_pair(svc, lc3[idx], office_item, rules)
                    if score == 0:
                        continue
                    if best is None or score > best[0]:
                        best = (score, idx, office_item, comp_ok)

            if best is None:
                break

            score, idx, office_item, comp_ok = best
            candidate = lc3[idx]
            record = MatchRecord(
                service=svc,
                service_match=True,
                tooth_surface_match=comp_ok,
                match=True if svc in lenient_services else comp_ok
            )
            if candidate.service_code != svc:
                record.matched_with = candidate.service_code
                record.match_type = COMPATIBLE_MATCH_TYPE
            matches.append(record)

            logger.debug(f"{svc}: paired with LC3 #{idx} ({candidate.service_code}), score {score}")

            remaining_pool.remove(idx)
            pending = [p for p in pending if p is not office_item]
            consumed.add(id(office_item))

    remaining_office = [o for o in office if id(o) not in consumed]
    return matches, remaining_office, remaining_pool
