from pathlib import Path

import pytest

import gporeport
from gporeport.parser import GPOReportParser
from gporeport.flattener import GPOFlattener
from gporeport.utils import utils
from gporeport.utils.utils import load_yaml_config

DATA_DIR = Path(__file__).parent / "data"


@pytest.fixture(autouse=True)
def user_config(tmp_path, monkeypatch):
    """Point the user configuration folder to an empty temporary folder"""
    config_dir = tmp_path / "user_config"
    monkeypatch.setattr(utils, "user_config_dir", lambda app: str(config_dir))
    monkeypatch.setattr(gporeport, "user_config_dir", lambda app: str(config_dir))
    return config_dir


@pytest.fixture
def data_dir():
    return DATA_DIR


@pytest.fixture
def report_path():
    return DATA_DIR / "report.xml"


@pytest.fixture
def translations():
    return load_yaml_config("gporeport.config", "translations.yaml")


@pytest.fixture
def extensions_config():
    return load_yaml_config("gporeport.config", "extensions.yaml")


@pytest.fixture
def report(report_path):
    return GPOReportParser().parse_file(str(report_path))


@pytest.fixture
def flattener(translations, extensions_config):
    return GPOFlattener(translations, extensions_config)


@pytest.fixture
def extension(report):
    """Extension element of the report by scope and xsi:type"""

    def find(scope, extension_type):
        for item in report[scope]["Extensions"]:
            if item["type"] == extension_type:
                return item["element"]
        raise KeyError(extension_type)

    return find
