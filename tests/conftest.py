"""
Pytest configuration and fixtures for DataForge Store tests.
"""
import pytest

from dataforge_store.config.store_settings import StoreSettings
from dataforge_store.filtering.dates import set_default_date_strategy


THEMES_XML = """<?xml version="1.0" encoding="UTF-8"?>
<Themes>
    <theme name="Dark Theme">
        <color>#000000</color>
    </theme>
    <theme name="Light Theme">
        <color>#FFFFFF</color>
    </theme>
</Themes>
"""

PEOPLE_JSON = """{
  "people": [
    {"name": "Ann", "age": 31},
    {"name": "Bob", "age": 42, "tags": ["admin", "ops"]}
  ]
}
"""

APP_YAML = """app:
  name: demo
  ports:
    - 80
    - 443
"""

APP_PROPERTIES = """# Application settings
user = admin
host: localhost
"""

ABC_CSV = "A;B;C\n1;2;3\n4;5;6\n7;8;9\n"


@pytest.fixture(autouse=True)
def fresh_settings():
    """Give every test default settings and the default date strategy."""
    StoreSettings._instance = None
    set_default_date_strategy(None)
    yield
    StoreSettings._instance = None
    set_default_date_strategy(None)


@pytest.fixture
def themes_xml():
    return THEMES_XML


@pytest.fixture
def people_json():
    return PEOPLE_JSON


@pytest.fixture
def app_yaml():
    return APP_YAML


@pytest.fixture
def app_properties():
    return APP_PROPERTIES


@pytest.fixture
def abc_csv():
    return ABC_CSV


@pytest.fixture
def data_dir(tmp_path):
    """Create a temporary directory holding one sample file per format."""
    root = tmp_path / "data"
    root.mkdir()
    (root / "abc.csv").write_text(ABC_CSV, encoding="utf-8")
    (root / "themes.xml").write_text(THEMES_XML, encoding="utf-8")
    (root / "people.json").write_text(PEOPLE_JSON, encoding="utf-8")
    (root / "app.yaml").write_text(APP_YAML, encoding="utf-8")
    (root / "app.properties").write_text(APP_PROPERTIES, encoding="utf-8")
    return root
