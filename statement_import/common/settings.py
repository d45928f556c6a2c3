"""
Import Settings

Typed configuration for the statement import, loaded from a YAML file.
"""
import os
from pathlib import Path
from typing import Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field

CONFIG_ENV_VAR = "STATEMENT_IMPORT_CONFIG"

DEFAULT_TEMPLATES_DIR = str(Path(__file__).resolve().parent.parent / "parsing" / "templates")


class ImportSettings(BaseModel):
    """Settings shared by the readers and the import facade."""

    templates_dir: str = Field(
        default=DEFAULT_TEMPLATES_DIR,
        description="Directory holding the JSON template files",
    )
    pdf_backend: Literal["pdfplumber", "pypdf"] = Field(
        default="pdfplumber",
        description="Library used to extract page text from PDF statements",
    )
    fallback_encoding: str = Field(
        default="cp1252",
        description="Encoding tried when a text export is not valid UTF-8",
    )
    log_level: str = Field(default="INFO", description="Python log level")
    log_file: Optional[str] = Field(default=None, description="JSON log file path")

    model_config = {"extra": "ignore"}


def load_settings(path: Optional[Union[str, Path]] = None) -> ImportSettings:
    """
    Load settings from a YAML file.

    Args:
        path: YAML file. Falls back to $STATEMENT_IMPORT_CONFIG.

    Returns:
        ImportSettings, with defaults for anything the file omits
        (or for everything when there is no file).
    """
    path = path or os.getenv(CONFIG_ENV_VAR)
    if not path or not Path(path).exists():
        return ImportSettings()

    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f) or {}

    section = data.get("statement_import", data)
    settings = ImportSettings(**section)

    # relative template dirs are resolved against the config file location
    templates_dir = Path(settings.templates_dir)
    if not templates_dir.is_absolute():
        settings.templates_dir = str((Path(path).resolve().parent / templates_dir).resolve())
    return settings
