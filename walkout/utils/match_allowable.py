# walkout/utils/match_allowable.py

from typing import List, Tuple
from walkout.utils.models import LineItem, MatchRecord, RuleSet
from walkout.utils.composite_key import item_key


def match_allowable(not_found: List[MatchRecord], lc3: List[LineItem], rules: RuleSet) -> Tuple[List[MatchRecord], List[MatchRecord]]:
    """
    Last-chance pass for not-found records using allowable changes.

    Only the first rule for a service is considered. The alternative is looked up
    in the full LC3 list, including items already used by earlier passes.

    Returns:
        (allowable_matches, final_not_found)
    """
    matches = []
    final_not_found = []

    for record in not_found:
        rule = rules.allowable_change_for(record.service)
        alt_entry = None
        if rule:
            alt_entry = next((e for e in lc3 if e.service_code == rule.alternative_service), None)

        if alt_entry is None:
            final_not_found.append(record)
            continue

        comp_ok = item_key(alt_entry) == item_key(record)
        matches.append(MatchRecord(
            service=record.service,
            service_match=True,
            tooth_surface_match=comp_ok,
            match=comp_ok
        ))

    return matches, final_not_found
