import pytest

from extrinsic_cal.logger import setup_logging
from extrinsic_cal.settings import Settings


@pytest.fixture(scope="session", autouse=True)
def setup_app_logging(tmp_path_factory):
    """
    Fixture to configure the application's logging for the entire test session.
    This runs automatically once before any tests are executed.
    """
    setup_logging(Settings(log_level="DEBUG", log_dir=tmp_path_factory.mktemp("logs")))
