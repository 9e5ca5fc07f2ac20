import sys
import json
import sqlite3
import pytest
from pathlib import Path

# Add the project root directory to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from walkout.utils.models import LineItem, RuleSet, CompatibilityRule, AllowableChangeRule
from walkout.utils.rule_store import init_rule_store, COMPATIBILITY_TABLE, ALLOWABLE_TABLE
from walkout.utils.lenient_services import load_lenient_services


# Common fixtures that can be used across test files
@pytest.fixture
def office_item():
    """Factory for normalized office line items"""
    def _make(service, tooth="", surface=""):
        return LineItem(service_code=service, tooth=tooth, surface=surface, source="office")
    return _make


@pytest.fixture
def lc3_item():
    """Factory for normalized LC3 line items"""
    def _make(service, tooth="", surface=""):
        return LineItem(service_code=service, tooth=tooth, surface=surface, source="lc3")
    return _make


@pytest.fixture
def office_payload():
    """Factory for raw office extraction JSON: rows of (Service, Tooth, Surface)"""
    def _make(*rows):
        return json.dumps({"data": [
            {"Service": s, "Tooth": t, "Surface": f, "Description": "office line"} for s, t, f in rows
        ]})
    return _make


@pytest.fixture
def lc3_payload():
    """Factory for raw LC3 extraction JSON: rows of (service_code, Tooth, Surface)"""
    def _make(*rows):
        return json.dumps({"data": [
            {"Description": {"service_code": s, "text": "lc3 line"}, "Tooth": t, "Surface": f} for s, t, f in rows
        ]})
    return _make


@pytest.fixture
def empty_rules():
    return RuleSet()


@pytest.fixture
def sample_rules():
    """Compatibility and allowable-change rules used across scenarios"""
    return RuleSet(
        compatibility={
            "D2330": CompatibilityRule(service_code="D2330", compatible_codes=["D2331"]),
            "D2391": CompatibilityRule(service_code="D2391", compatible_codes=["D2392"], tooth_filter="30"),
        },
        allowable_changes=[
            AllowableChangeRule(original_service="D4999", alternative_service="D4355"),
        ]
    )


@pytest.fixture
def lenient_services():
    return load_lenient_services()


@pytest.fixture
def rules_db(tmp_path):
    """SQLite rule store populated with a few rules"""
    db_path = str(tmp_path / "rules.db")
    init_rule_store(db_path)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()
    cursor.executemany(
        f"INSERT INTO {COMPATIBILITY_TABLE} (service_code, compatible_codes, tooth_filter, surface_filter) VALUES (?, ?, ?, ?)",
        [
            ("D2330", json.dumps(["D2331"]), "", ""),
            ("D2391", json.dumps(["D2392", "D2393"]), "30", "MO"),
        ]
    )
    cursor.executemany(
        f"INSERT INTO {ALLOWABLE_TABLE} (original_service, alternative_service) VALUES (?, ?)",
        [
            ("D4999", "D4355"),
            ("D4999", "D4346"),
            ("D1110", "D4910"),
        ]
    )
    conn.commit()
    conn.close()
    return db_path
