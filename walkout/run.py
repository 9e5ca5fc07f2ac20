# walkout/run.py

import os
import sys
import json
import logging
import argparse
from typing import List, Set, Dict, Any
from walkout.config.settings import WALKOUT_INPUT_PREFIX, setup_logging
from walkout.utils.models import LineItem, RuleSet, AnalysisResult
from walkout.utils.errors import WalkoutAnalysisError
from walkout.utils.extract_line_items import parse_payloads
from walkout.utils.rule_store import load_rule_set
from walkout.utils.lenient_services import load_lenient_services
from walkout.utils.match_exact import match_exact
from walkout.utils.match_compatible import match_compatible
from walkout.utils.match_not_found import collect_not_found
from walkout.utils.match_allowable import match_allowable
from walkout.utils.merge_results import merge_results
from walkout.utils.loader import load_walkout_from_s3, extract_walkout_payloads
from walkout.utils import s3_utils

logger = logging.getLogger(__name__)


def reconcile(office: List[LineItem], lc3: List[LineItem], rules: RuleSet, lenient_services: Set[str]) -> AnalysisResult:
    """
    Runs the four matching passes over already-parsed line items.
    """
    pool = list(range(len(lc3)))

    # Pass 1: service code + tooth/surface agree
    full_matches, office_remaining, pool = match_exact(office, lc3, pool)

    # Pass 2: service (or compatible code) agrees, best tooth/surface pairing
    partial_matches, office_remaining, pool = match_compatible(
        office_remaining, lc3, pool, rules, lenient_services
    )

    # Pass 3: carry the rest forward
    not_found = collect_not_found(office_remaining)

    # Pass 4: allowable changes against the full LC3 list
    allowable_matches, final_not_found = match_allowable(not_found, lc3, rules)

    logger.info(
        f"Reconciled {len(office)} office lines: {len(full_matches)} full, "
        f"{len(partial_matches)} partial, {len(allowable_matches)} allowable, "
        f"{len(final_not_found)} not found"
    )

    return merge_results(full_matches, partial_matches, allowable_matches, final_not_found)


def analyze_walkout_data(office_data, lc3_data, rules: RuleSet = None, lenient_services: Set[str] = None,
                         db_path: str = None) -> Dict[str, Any]:
    """
    Compares office and LC3 extraction payloads (JSON text).

    Rules are loaded from the rule store unless given. Any failure returns a
    structured response with success=False and no partial result.
    """
    try:
        office, lc3 = parse_payloads(office_data, lc3_data)
        if rules is None:
            rules = load_rule_set(db_path) if db_path else load_rule_set()
        if lenient_services is None:
            lenient_services = load_lenient_services()
    except WalkoutAnalysisError as e:
        logger.error(f"Walkout analysis aborted: {e.message} ({e.detail or 'no detail'})")
        return e.to_response()

    result = reconcile(office, lc3, rules, lenient_services)
    return {"success": True, "data": result.to_dict()}


def run_walkout_analysis(file_name: str, rules: RuleSet = None, db_path: str = None,
                         lenient_services: Set[str] = None) -> Dict[str, Any]:
    """
    Loads a stored walkout from S3 and analyzes it. The caller persists the result.
    """
    try:
        walkout = load_walkout_from_s3(file_name)
    except Exception as e:
        logger.error(f"Error loading {file_name}: {str(e)}", exc_info=True)
        return {"success": False, "message": "Failed to load walkout", "error": str(e)}

    try:
        office_data, lc3_data = extract_walkout_payloads(walkout)
    except WalkoutAnalysisError as e:
        logger.warning(f"{file_name}: {e.message}")
        return e.to_response()

    response = analyze_walkout_data(office_data, lc3_data, rules=rules,
                                    lenient_services=lenient_services, db_path=db_path)

    if response["success"]:
        verdict = "MATCH" if response["data"]["overallMatch"] else "MISMATCH"
        logger.info(f"✅ {file_name} → {verdict}")
    else:
        logger.info(f"❌ {file_name} → {response['message']}")

    return response


def run_batch(limit: int = None, db_path: str = None) -> Dict[str, Dict[str, Any]]:
    """
    Analyzes every walkout JSON under WALKOUT_INPUT_PREFIX.

    Rules and lenient services are loaded once and shared; failing to load
    either aborts the batch. A walkout that fails on its own is recorded as a
    failure and the batch continues.
    """
    keys = [k for k in s3_utils.list_objects(WALKOUT_INPUT_PREFIX) if k.lower().endswith('.json')]
    if limit is not None:
        keys = keys[:int(limit)]

    if not keys:
        logger.info("No walkout JSON files found")
        return {}

    logger.info(f"Found {len(keys)} walkout files to analyze")
    rules = load_rule_set(db_path) if db_path else load_rule_set()
    lenient_services = load_lenient_services()

    results = {}
    for key in keys:
        file_name = os.path.basename(key)
        results[file_name] = run_walkout_analysis(file_name, rules=rules, lenient_services=lenient_services)
    return results


def main(argv=None):
    parser = argparse.ArgumentParser(description="Reconcile office and LC3 walkout line items")
    parser.add_argument("office", nargs="?", help="Office extraction JSON file")
    parser.add_argument("lc3", nargs="?", help="LC3 extraction JSON file")
    parser.add_argument("--s3-key", help="Analyze a stored walkout by file name")
    parser.add_argument("--batch", action="store_true", help="Analyze every stored walkout")
    parser.add_argument("--limit", type=int, help="Maximum number of walkouts in batch mode")
    parser.add_argument("--db", help="Rule store path (defaults to RULES_DB_PATH)")
    args = parser.parse_args(argv)

    setup_logging()

    if args.batch:
        output = run_batch(limit=args.limit, db_path=args.db)
    elif args.s3_key:
        output = run_walkout_analysis(args.s3_key, db_path=args.db)
    elif args.office and args.lc3:
        with open(args.office, 'r') as f:
            office_data = f.read()
        with open(args.lc3, 'r') as f:
            lc3_data = f.read()
        output = analyze_walkout_data(office_data, lc3_data, db_path=args.db)
    else:
        parser.print_usage()
        return 2

    print(json.dumps(output, indent=2))
    if isinstance(output, dict) and output.get("success") is False:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
