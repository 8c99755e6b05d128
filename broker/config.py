from dataclasses import dataclass

from shared import _int_env, _str_env

# Broker API
API_PORT = _int_env("SHAREBROKER_API_PORT", 8080)
BIND_HOST = _str_env("SHAREBROKER_BIND_HOST", "0.0.0.0")

# Persisted state
DATA_DIR = _str_env("SHAREBROKER_DATA_DIR", "./data")
PERSISTENCE = _str_env("SHAREBROKER_PERSISTENCE", "file").lower()
DATABASE_URL = _str_env("SHAREBROKER_DATABASE_URL", "sqlite:///./data/sharebroker.db")
INSTANCES_FILENAME = "service_instances.json"
BINDINGS_FILENAME = "service_bindings.json"

# Share backend
STORAGE_ROOT = _str_env("SHAREBROKER_STORAGE_ROOT", "./share_storage")
MOUNT_PATH = _str_env("SHAREBROKER_MOUNT_PATH", "/")
STORAGE_ENDPOINT = _str_env("SHAREBROKER_STORAGE_ENDPOINT", "127.0.0.1:6789")
STORAGE_CREDENTIAL = _str_env("SHAREBROKER_STORAGE_CREDENTIAL", "")

# Provisioning and binding defaults
DASHBOARD_URL = _str_env("SHAREBROKER_DASHBOARD_URL", "http://dashboard_url")
POLL_INTERVAL_SECONDS = _int_env("SHAREBROKER_POLL_INTERVAL_SECONDS", 10)
CONTAINER_ROOT = _str_env("SHAREBROKER_CONTAINER_ROOT", "/var/vcap/data")
DRIVER = _str_env("SHAREBROKER_DRIVER", "cephfs")

# Logging
LOG_LEVEL = _str_env("SHAREBROKER_LOG_LEVEL", "INFO")
LOG_FILE = _str_env("SHAREBROKER_LOG_FILE", "") or None

PERSISTENCE_KINDS = ("file", "sql")


@dataclass
class BrokerSettings:
    """Runtime settings for one broker process (defaults come from the environment)."""
    data_dir: str = DATA_DIR
    persistence: str = PERSISTENCE
    database_url: str = DATABASE_URL
    storage_root: str = STORAGE_ROOT
    mount_path: str = MOUNT_PATH
    storage_endpoint: str = STORAGE_ENDPOINT
    storage_credential: str = STORAGE_CREDENTIAL
    dashboard_url: str = DASHBOARD_URL
    poll_interval_seconds: int = POLL_INTERVAL_SECONDS
    container_root: str = CONTAINER_ROOT
    driver: str = DRIVER
