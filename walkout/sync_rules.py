#!/usr/bin/env python3
"""
sync_rules.py

Syncs the reconciliation rules (Code Compatibility and Allowable Changes)
from the rules workbook into the SQLite rule store used by the analysis.
Compatibility rules are upserted per service code; allowable changes are
replaced wholesale so their row order is kept.
"""
import sys
import json
import sqlite3
import logging
import argparse
from contextlib import closing
from datetime import datetime
import pandas as pd
from walkout.config.settings import (
    RULES_DB_PATH, RULES_WORKBOOK_PATH, setup_logging,
    CODE_COMPATIBILITY_SHEET, ALLOWABLE_CHANGES_SHEET,
    COMPAT_SERVICE_COLUMN, COMPAT_CODES_COLUMN, COMPAT_TOOTH_COLUMN, COMPAT_SURFACE_COLUMN,
    ALLOWABLE_ORIGINAL_COLUMN, ALLOWABLE_ALTERNATIVE_COLUMN,
)
from walkout.utils.rule_store import init_rule_store, COMPATIBILITY_TABLE, ALLOWABLE_TABLE

logger = logging.getLogger(__name__)


def read_sheet(workbook_path: str, sheet_name: str, required_columns) -> pd.DataFrame:
    """Read one sheet as strings with blanks as ''."""
    df = pd.read_excel(workbook_path, sheet_name=sheet_name, dtype=str)
    df.columns = [str(c).strip() for c in df.columns]

    missing = [c for c in required_columns if c not in df.columns]
    if missing:
        raise ValueError(f"Sheet '{sheet_name}' is missing columns: {', '.join(missing)}")

    return df.fillna("")


def parse_code_list(value: str):
    """'d2331, D2332,' -> ['D2331', 'D2332']"""
    return [s.strip().upper() for s in str(value).split(",") if s.strip()]


def sync_code_compatibility(workbook_path: str = RULES_WORKBOOK_PATH, db_path: str = RULES_DB_PATH) -> dict:
    logger.info("--- Syncing Code Compatibility Data ---")
    try:
        df = read_sheet(workbook_path, CODE_COMPATIBILITY_SHEET, [COMPAT_SERVICE_COLUMN, COMPAT_CODES_COLUMN])
        if df.empty:
            logger.warning("No data found in Code Compatibility sheet")
            return {"success": False, "message": "No data found"}

        init_rule_store(db_path)
        sync_time = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        synced_count = 0
        skipped_count = 0

        with closing(sqlite3.connect(db_path)) as conn:
            cursor = conn.cursor()
            for _, row in df.iterrows():
                service_code = row[COMPAT_SERVICE_COLUMN].strip().upper()
                if not service_code:
                    skipped_count += 1
                    continue

                cursor.execute(f"""
                    INSERT OR REPLACE INTO {COMPATIBILITY_TABLE}
                        (service_code, compatible_codes, tooth_filter, surface_filter, last_synced_at)
                    VALUES (?, ?, ?, ?, ?)
                """, (
                    service_code,
                    json.dumps(parse_code_list(row[COMPAT_CODES_COLUMN])),
                    row.get(COMPAT_TOOTH_COLUMN, "").strip(),
                    row.get(COMPAT_SURFACE_COLUMN, "").strip(),
                    sync_time,
                ))
                synced_count += 1

            conn.commit()

        logger.info(f"✓ Code Compatibility Sync Complete - Synced: {synced_count}, Skipped: {skipped_count}")
        return {
            "success": True,
            "synced": synced_count,
            "skipped": skipped_count,
            "syncedAt": sync_time,
        }
    except Exception as e:
        logger.error(f"✗ Code Compatibility sync failed: {str(e)}")
        raise


def sync_allowable_changes(workbook_path: str = RULES_WORKBOOK_PATH, db_path: str = RULES_DB_PATH) -> dict:
    logger.info("--- Syncing Allowable Changes Data ---")
    try:
        df = read_sheet(workbook_path, ALLOWABLE_CHANGES_SHEET, [ALLOWABLE_ORIGINAL_COLUMN, ALLOWABLE_ALTERNATIVE_COLUMN])
        if df.empty:
            logger.warning("No data found in Allowable Changes sheet")
            return {"success": False, "message": "No data found"}

        init_rule_store(db_path)
        sync_time = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        synced_count = 0
        skipped_count = 0

        with closing(sqlite3.connect(db_path)) as conn:
            cursor = conn.cursor()

            # Clear existing rules before syncing; row order is rule priority
            cursor.execute(f"DELETE FROM {ALLOWABLE_TABLE}")

            for _, row in df.iterrows():
                original_service = row[ALLOWABLE_ORIGINAL_COLUMN].strip().upper()
                alternative_service = row[ALLOWABLE_ALTERNATIVE_COLUMN].strip().upper()
                if not original_service or not alternative_service:
                    skipped_count += 1
                    continue

                cursor.execute(f"""
                    INSERT INTO {ALLOWABLE_TABLE} (original_service, alternative_service, last_synced_at)
                    VALUES (?, ?, ?)
                """, (original_service, alternative_service, sync_time))
                synced_count += 1

            conn.commit()

        logger.info(f"✓ Allowable Changes Sync Complete - Synced: {synced_count}, Skipped: {skipped_count}")
        return {
            "success": True,
            "synced": synced_count,
            "skipped": skipped_count,
            "syncedAt": sync_time,
        }
    except Exception as e:
        logger.error(f"✗ Allowable Changes sync failed: {str(e)}")
        raise


def sync_all_rules(workbook_path: str = RULES_WORKBOOK_PATH, db_path: str = RULES_DB_PATH) -> dict:
    logger.info("🔄 Starting Analysis Rule Sync")

    code_compatibility_result = sync_code_compatibility(workbook_path, db_path)
    allowable_changes_result = sync_allowable_changes(workbook_path, db_path)

    logger.info("✓ Analysis Rule Sync Complete")
    return {
        "success": True,
        "codeCompatibility": code_compatibility_result,
        "allowableChanges": allowable_changes_result,
        "syncedAt": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
    }


def get_sync_status(db_path: str = RULES_DB_PATH) -> dict:
    """
    Rule counts and last sync time per table.
    """
    init_rule_store(db_path)
    with closing(sqlite3.connect(db_path)) as conn:
        cursor = conn.cursor()

        status = {}
        for label, table in (("codeCompatibility", COMPATIBILITY_TABLE), ("allowableChanges", ALLOWABLE_TABLE)):
            cursor.execute(f"SELECT COUNT(*), MAX(last_synced_at) FROM {table}")
            count, last_synced_at = cursor.fetchone()
            status[label] = {
                "count": count,
                "lastSyncedAt": last_synced_at or "Never synced",
            }

    return status


def main(argv=None):
    parser = argparse.ArgumentParser(description="Sync reconciliation rules into the rule store")
    parser.add_argument("--workbook", default=RULES_WORKBOOK_PATH, help="Rules workbook (.xlsx)")
    parser.add_argument("--db", default=RULES_DB_PATH, help="Rule store path")
    parser.add_argument("--status", action="store_true", help="Only print sync status")
    args = parser.parse_args(argv)

    setup_logging()

    if args.status:
        output = get_sync_status(args.db)
    else:
        output = sync_all_rules(args.workbook, args.db)

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
