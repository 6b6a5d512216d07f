"""Top-level package for extrinsic_cal."""

from pathlib import Path

from platformdirs import user_data_dir

__package_name__ = "extrinsic_cal"
__version__ = "0.1.0"

# - Windows: C:\Users\<user>\AppData\Local\extrinsic_cal
# - macOS:   ~/Library/Application Support/extrinsic_cal
# - Linux:   ~/.local/share/extrinsic_cal
APP_DIR = Path(user_data_dir(appname=__package_name__))

LOG_DIR = APP_DIR / "logs"
LOG_FILE_PATH = LOG_DIR / "extrinsic_cal.log"

APP_SETTINGS_PATH = APP_DIR / "settings.toml"

# A helpful reference to the source code root
__root__ = Path(__file__).parent.parent.parent
