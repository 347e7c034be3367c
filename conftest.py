# Ensure the repository root is on sys.path so tests can import the
# `merchant_notifications` package, and pin settings before it is imported.
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent
if str(ROOT) not in sys.path:
    # Insert at front so local packages shadow any installed packages
    sys.path.insert(0, str(ROOT))

test_env_vars = {
    "ENVIRONMENT": "development",
    "MONGODB_URI": "mongodb://localhost:27017",
    "MONGODB_DATABASE": "merchants_test",
    "MAIL_RELAY_URL": "https://relay.test/send",
    "MAIL_RELAY_TIMEOUT": "10",
    "WATCHED_BRANCHES": "[]",
    "LOG_LEVEL": "ERROR",
    "LOG_FORMAT": "console",
}

for key, value in test_env_vars.items():
    os.environ[key] = value
