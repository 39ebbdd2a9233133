"""
Tests for database credential loading from MySQL option files.
"""

from pathlib import Path

import pytest
from sqlalchemy.engine import URL

from rddropbox.app.persistence.credentials import DatabaseSettings, read_mycnf
from rddropbox.app.persistence.errors import CredentialsError


MYCNF = """\
[mysql]
no-auto-rehash

[client]
host = db.studio.example
port = 3307
user = "rdadmin"
password = 's3cr3t'
database = RivendellTest
default-character-set = utf8mb4
"""


@pytest.fixture
def mycnf(tmp_path: Path) -> Path:
    path = tmp_path / ".my.cnf"
    path.write_text(MYCNF)
    return path


class TestReadMycnf:
    """Tests for read_mycnf()."""

    def test_reads_client_section(self, mycnf):
        assert read_mycnf(str(mycnf)) == {
            "host": "db.studio.example",
            "port": "3307",
            "user": "rdadmin",
            "password": "s3cr3t",
            "name": "RivendellTest",
        }

    def test_missing_file_is_empty(self, tmp_path: Path):
        assert read_mycnf(str(tmp_path / "absent.cnf")) == {}

    def test_file_without_client_section_is_empty(self, tmp_path: Path):
        path = tmp_path / "my.cnf"
        path.write_text("[mysqld]\nport = 3306\n")
        assert read_mycnf(str(path)) == {}

    def test_unparsable_file_raises(self, tmp_path: Path):
        path = tmp_path / "my.cnf"
        path.write_text("user = nobody-knows-the-section\n")
        with pytest.raises(CredentialsError):
            read_mycnf(str(path))


class TestDatabaseSettings:
    """Tests for DatabaseSettings.load() and URL building."""

    def test_defaults_without_option_file(self, tmp_path: Path):
        settings = DatabaseSettings.load(str(tmp_path / "absent.cnf"))

        assert settings.host == "localhost"
        assert settings.port == 3306
        assert settings.user == "rduser"
        assert settings.password is None
        assert settings.name == "Rivendell"

    def test_option_file_values(self, mycnf):
        settings = DatabaseSettings.load(str(mycnf))

        assert settings.host == "db.studio.example"
        assert settings.port == 3307
        assert settings.user == "rdadmin"
        assert settings.name == "RivendellTest"

    def test_explicit_values_override_option_file(self, mycnf):
        settings = DatabaseSettings.load(str(mycnf), host="10.0.0.5", user=None, password="letmein")

        assert settings.host == "10.0.0.5"
        assert settings.user == "rdadmin"
        assert settings.password == "letmein"

    def test_invalid_port_raises(self, tmp_path: Path):
        path = tmp_path / "my.cnf"
        path.write_text("[client]\nport = eleven\n")
        with pytest.raises(CredentialsError):
            DatabaseSettings.load(str(path))

    def test_sqlalchemy_url(self):
        url = DatabaseSettings(host="db", user="rduser", password="pw").sqlalchemy_url()

        assert isinstance(url, URL)
        assert url.drivername == "mysql+pymysql"
        assert url.host == "db"
        assert url.port == 3306
        assert url.database == "Rivendell"
        assert url.password == "pw"

    def test_url_override_is_used_verbatim(self):
        settings = DatabaseSettings(host="ignored", url="sqlite:///rd.db")
        assert settings.sqlalchemy_url() == "sqlite:///rd.db"

    def test_describe_hides_password(self):
        text = DatabaseSettings(password="hunter2").describe()

        assert "hunter2" not in text
        assert "rduser" in text
