"""
Database credentials.

Values come from the [client] section of a MySQL option file (~/.my.cnf by
default), overridden by anything given explicitly on the command line.
"""

import configparser
import logging
import os
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.engine import URL

from .errors import CredentialsError

logger = logging.getLogger(__name__)

DEFAULT_MYCNF = os.path.join(os.path.expanduser("~"), ".my.cnf")
MYCNF_SECTION = "client"
DRIVER = "mysql+pymysql"

# Option file keys -> DatabaseSettings fields
_MYCNF_KEYS = {
    "host": "host",
    "port": "port",
    "user": "user",
    "password": "password",
    "database": "name",
}


class DatabaseSettings(BaseModel):
    """
    Connection settings for the Rivendell database.

    url, when set, is used verbatim and the other fields are ignored.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    host: str = "localhost"
    port: int = Field(default=3306, ge=1, le=65535)
    user: str = "rduser"
    password: Optional[str] = None
    name: str = "Rivendell"
    url: Optional[str] = Field(
        default=None, description="SQLAlchemy database URL overriding all other fields"
    )

    @classmethod
    def load(cls, mycnf_path: Optional[str] = DEFAULT_MYCNF, **overrides) -> "DatabaseSettings":
        """
        Build settings from an option file plus explicit overrides.

        Overrides that are None are ignored, so argparse defaults of None
        never mask a value from the option file.

        Raises:
            CredentialsError: If the option file exists but cannot be parsed,
                or the resulting settings are invalid
        """
        values = read_mycnf(mycnf_path) if mycnf_path else {}
        values.update({k: v for k, v in overrides.items() if v is not None})

        try:
            return cls(**values)
        except ValueError as e:
            raise CredentialsError(f"Invalid database settings: {e}") from e

    def sqlalchemy_url(self) -> Union[str, URL]:
        if self.url:
            return self.url
        return URL.create(
            DRIVER,
            username=self.user,
            password=self.password or None,
            host=self.host,
            port=self.port,
            database=self.name,
        )

    def describe(self) -> str:
        """Connection target without the password, for logging."""
        url = self.sqlalchemy_url()
        if isinstance(url, URL):
            return url.render_as_string(hide_password=True)
        return url


def read_mycnf(path: str) -> dict:
    """
    Read the [client] section of a MySQL option file.

    Returns:
        Dict of DatabaseSettings field values found in the file (may be empty)

    Raises:
        CredentialsError: If the file exists but cannot be parsed
    """
    if not os.path.isfile(path):
        logger.debug(f"No option file at {path}; using defaults")
        return {}

    parser = configparser.ConfigParser(allow_no_value=True, strict=False, interpolation=None)
    try:
        with open(path, "r") as f:
            parser.read_file(f)
    except (configparser.Error, OSError, UnicodeDecodeError) as e:
        raise CredentialsError(f"Unable to read option file '{path}': {e}") from e

    if not parser.has_section(MYCNF_SECTION):
        logger.debug(f"Option file {path} has no [{MYCNF_SECTION}] section")
        return {}

    values = {}
    for key, value in parser.items(MYCNF_SECTION):
        field_name = _MYCNF_KEYS.get(key.replace("-", "_"))
        if field_name is None or value is None:
            continue
        values[field_name] = _unquote(value.strip())

    logger.debug(f"Read [{MYCNF_SECTION}] settings from {path}: {sorted(values)}")
    return values


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value
