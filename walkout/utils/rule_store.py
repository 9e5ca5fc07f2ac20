# walkout/utils/rule_store.py

import os
import json
import sqlite3
import logging
from typing import Dict, List
from walkout.config.settings import RULES_DB_PATH
from walkout.utils.models import CompatibilityRule, AllowableChangeRule, RuleSet
from walkout.utils.errors import RuleStoreError

logger = logging.getLogger(__name__)

COMPATIBILITY_TABLE = "code_compatibility"
ALLOWABLE_TABLE = "allowable_changes"


def init_rule_store(db_path: str = RULES_DB_PATH):
    """
    Creates the rule tables if they don't exist yet.
    """
    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    cursor.execute(f"""
        CREATE TABLE IF NOT EXISTS {COMPATIBILITY_TABLE} (
            service_code TEXT PRIMARY KEY,
            compatible_codes TEXT NOT NULL DEFAULT '[]',
            tooth_filter TEXT NOT NULL DEFAULT '',
            surface_filter TEXT NOT NULL DEFAULT '',
            last_synced_at TEXT
        )
    """)

    cursor.execute(f"""
        CREATE TABLE IF NOT EXISTS {ALLOWABLE_TABLE} (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            original_service TEXT NOT NULL,
            alternative_service TEXT NOT NULL,
            last_synced_at TEXT
        )
    """)

    conn.commit()
    conn.close()


def _connect(db_path: str) -> sqlite3.Connection:
    # sqlite3.connect would silently create an empty database
    if not os.path.exists(db_path):
        raise RuleStoreError(f"Rule store not found: {db_path}")
    try:
        return sqlite3.connect(db_path)
    except sqlite3.Error as e:
        raise RuleStoreError(f"Could not open rule store {db_path}: {e}")


def load_compatibility_rules(db_path: str = RULES_DB_PATH) -> Dict[str, CompatibilityRule]:
    """
    Fetch every compatibility rule, keyed by service code.
    """
    conn = _connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute(f"""
            SELECT service_code, compatible_codes, tooth_filter, surface_filter
            FROM {COMPATIBILITY_TABLE}
        """)
        rows = cursor.fetchall()
    except sqlite3.Error as e:
        raise RuleStoreError(f"Could not read {COMPATIBILITY_TABLE}: {e}")
    finally:
        conn.close()

    rules = {}
    for service_code, codes_json, tooth_filter, surface_filter in rows:
        try:
            codes = json.loads(codes_json or "[]")
        except ValueError as e:
            raise RuleStoreError(f"Corrupt compatible_codes for {service_code}: {e}")
        rules[service_code] = CompatibilityRule(
            service_code=service_code,
            compatible_codes=codes,
            tooth_filter=tooth_filter or "",
            surface_filter=surface_filter or ""
        )
    return rules


def load_allowable_changes(db_path: str = RULES_DB_PATH) -> List[AllowableChangeRule]:
    """
    Fetch allowable changes in the order they were synced.
    """
    conn = _connect(db_path)
    try:
        cursor = conn.cursor()
        cursor.execute(f"""
            SELECT original_service, alternative_service
            FROM {ALLOWABLE_TABLE}
            ORDER BY id
        """)
        rows = cursor.fetchall()
    except sqlite3.Error as e:
        raise RuleStoreError(f"Could not read {ALLOWABLE_TABLE}: {e}")
    finally:
        conn.close()

    return [AllowableChangeRule(original_service=o, alternative_service=a) for o, a in rows]


def load_rule_set(db_path: str = RULES_DB_PATH) -> RuleSet:
    """
    Loads both rule tables. Either both load or RuleStoreError is raised;
    a partial rule set is never returned.
    """
    rule_set = RuleSet(
        compatibility=load_compatibility_rules(db_path),
        allowable_changes=load_allowable_changes(db_path)
    )
    if rule_set.is_empty():
        logger.warning(f"Rule store {db_path} has no compatibility or allowable-change rules")
    else:
        logger.debug(f"Loaded {len(rule_set.compatibility)} compatibility rules, "
                     f"{len(rule_set.allowable_changes)} allowable changes")
    return rule_set
