import sys
import os
import pytest
from pathlib import Path

# Add the src directory to Python path for imports
root_dir = Path(__file__).parent
src_dir = root_dir / "src"
sys.path.insert(0, str(src_dir))
sys.path.insert(0, str(root_dir))

# boto3 needs a region and credentials even when moto intercepts the calls
os.environ.setdefault("AWS_DEFAULT_REGION", "eu-west-2")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("TRANSACTIONS_TABLE", "test-transactions")


def pytest_configure(config):
    """
    Validate Python version and configure pytest
    """
    if sys.version_info[0] < 3:
        raise SystemError("Python 3 is required to run these tests")

    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
