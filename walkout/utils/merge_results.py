# walkout/utils/merge_results.py

from typing import List
from walkout.utils.models import MatchRecord, AnalysisResult


def merge_results(
    full_matches: List[MatchRecord],
    partial_matches: List[MatchRecord],
    allowable_matches: List[MatchRecord],
    not_found: List[MatchRecord]
) -> AnalysisResult:
    """
    Concatenates pass outputs in pass order and computes the verdict.

    overall_match is True only if every record matched. Summary counts use the
    final buckets, i.e. after allowable changes resolved some not-found items.
    """
    merged = full_matches + partial_matches + allowable_matches + not_found

    return AnalysisResult(
        merged_matches=merged,
        overall_match=all(m.match for m in merged),
        summary={
            "total": len(merged),
            "fullMatch": len(full_matches),
            "partialMatch": len(partial_matches),
            "allowableChanges": len(allowable_matches),
            "notFound": len(not_found),
        }
    )
