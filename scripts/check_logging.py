import sys
import os

# Add the project root to sys.path
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), "../"))
sys.path.append(BASE_DIR)

from packages.aia_core.logging import get_logger
from packages.aia_core.logging.config import ENGINE_ERROR_LOG_FILE, ENGINE_LOG_FILE

logger = get_logger("verification_script")

def verify_logging():
    print(f"Base Directory: {BASE_DIR}")

    logger.debug("This is a DEBUG message")
    logger.info("This is an INFO message")
    logger.warning("This is a WARNING message")
    logger.error("This is an ERROR message")

    try:
        1 / 0
    except ZeroDivisionError:
        logger.exception("This is an INTENTIONAL EXCEPTION")

    for path, expected, forbidden in (
        (ENGINE_LOG_FILE, ["DEBUG message", "INTENTIONAL EXCEPTION"], None),
        (ENGINE_ERROR_LOG_FILE, ["ERROR message", "INTENTIONAL EXCEPTION"], "DEBUG message"),
    ):
        if not os.path.exists(path):
            print(f"[FAILURE] {path} does not exist.")
            continue
        print(f"[SUCCESS] {path} exists.")
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
        if all(text in content for text in expected):
            print(f"[SUCCESS] {os.path.basename(path)} contains generated logs.")
        else:
            print(f"[FAILURE] {os.path.basename(path)} missing expected content.")
        if forbidden and forbidden in content:
            print(f"[FAILURE] {os.path.basename(path)} contains DEBUG logs (should not).")

if __name__ == "__main__":
    verify_logging()
