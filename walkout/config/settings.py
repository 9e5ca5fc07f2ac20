import os
import sys
import logging
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

PACKAGE_ROOT = Path(__file__).resolve().parents[1]

# Base paths
RULES_DB_PATH = os.getenv("RULES_DB_PATH", "rules.db")
RULES_WORKBOOK_PATH = os.getenv("RULES_WORKBOOK_PATH", "analysis_rules.xlsx")
DATA_DIR = os.getenv("DATA_DIR", str(PACKAGE_ROOT / "data"))
LENIENT_SERVICES_PATH = os.path.join(DATA_DIR, "lenient_services.json")

# S3 prefixes
S3_BUCKET = os.getenv("S3_BUCKET")
WALKOUT_INPUT_PREFIX = os.getenv("WALKOUT_INPUT_PREFIX", "data/walkouts/")

# Rules workbook layout
CODE_COMPATIBILITY_SHEET = "Code Compatibility"
ALLOWABLE_CHANGES_SHEET = "Allowable Changes"

COMPAT_SERVICE_COLUMN = "Service Code"
COMPAT_CODES_COLUMN = "Compatible Codes"
COMPAT_TOOTH_COLUMN = "Tooth"
COMPAT_SURFACE_COLUMN = "Surface"

ALLOWABLE_ORIGINAL_COLUMN = "Original Service"
ALLOWABLE_ALTERNATIVE_COLUMN = "Alternative Service"

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = None):
    """Set up logging configuration for command-line entry points."""
    logging.basicConfig(
        level=getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)]
    )
