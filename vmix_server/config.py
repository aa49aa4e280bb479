"""
Configuration loader
"""
import os
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel

from vmix_server.core.signature import MAX_FILE_BYTES


DEFAULT_CONFIG_PATH = "config/server.yaml"


class Settings(BaseModel):
    """Server configuration"""
    server_name: str = "VMix Server"
    host: str = "0.0.0.0"
    port: int = 3000
    client_url: str = "http://localhost:4200"   # CORS origin of the web client
    log_level: str = "INFO"
    max_file_bytes: int = MAX_FILE_BYTES         # signature check limit
    max_upload_bytes: int = 10 * 1024 * 1024    # upload endpoint limit
    upload_field: str = "excel"
    allowed_extensions: List[str] = [".xlsx", ".xls"]
    allowed_mime_types: List[str] = [
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "application/vnd.ms-excel",
        "application/excel",
        "application/x-excel",
        "application/x-msexcel",
    ]
    frontend_dir: Optional[str] = None


# Environment variable -> settings field
ENV_OVERRIDES = {
    "HOST": "host",
    "PORT": "port",
    "CLIENT_URL": "client_url",
    "LOG_LEVEL": "log_level",
    "FRONTEND_DIR": "frontend_dir",
}


def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file, then apply environment overrides

    Args:
        config_path: Path to config file. Falls back to ``$VMIX_CONFIG``,
            then ``config/server.yaml``.

    Returns:
        Settings object

    Raises:
        FileNotFoundError: If an explicitly requested config file is missing
    """
    explicit = config_path or os.getenv("VMIX_CONFIG")
    path = Path(explicit or DEFAULT_CONFIG_PATH)

    data = {}
    if path.exists():
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    elif explicit:
        raise FileNotFoundError(f"Config file not found: {path}")

    for env_name, field in ENV_OVERRIDES.items():
        value = os.getenv(env_name)
        if value:
            data[field] = value

    return Settings(**data)
