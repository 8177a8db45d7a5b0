import csv
import json

import pytest

from gporeport.core import GPOReportCore


class FakeGenerator:
    """Stand-in for the platform report generator"""

    def __init__(self, reports, gpos=None):
        self.reports = reports
        self.gpos = gpos or []
        self.requested = None

    def list_gpos(self):
        return self.gpos

    def generate_many(self, targets):
        self.requested = targets
        return {target: self.reports[target] for target in targets if target in self.reports}


@pytest.fixture
def core():
    return GPOReportCore()


@pytest.fixture
def report_xml(report_path):
    return report_path.read_text(encoding="utf-8")


def test_parse_to_json_file(core, data_dir, tmp_path):
    output = tmp_path / "settings.json"

    core.parse([str(data_dir)], json_path=str(output))

    records = json.loads(output.read_text(encoding="utf-8"))
    assert len(records) == 18
    assert records[0]["GPO"] == "Legal Notice"
    assert records[-1]["GPO"] == "Workstation Baseline"


def test_parse_to_csv_file(core, report_path, tmp_path):
    output = tmp_path / "settings.csv"

    core.parse([str(report_path)], extensions=["drivemaps"], csv_path=str(output))

    with open(output, encoding="utf-8", newline="") as file:
        rows = list(csv.DictReader(file))

    assert len(rows) == 3
    assert rows[1]["Drive"] == "First available, starting at S:"
    assert rows[1]["Password"] == "GPPstillStandingStrong2k18"


def test_parse_print_json(core, report_path, capsys):
    core.parse([str(report_path)], scopes=["user"], search="fs01", print_json=True)

    records = json.loads(capsys.readouterr().out)
    assert len(records) == 5
    assert {record["Extension"] for record in records} == {"Drive Maps", "Folder Redirection"}


def test_parse_print_tables(core, report_path, capsys):
    core.parse([str(report_path)], extensions=["scripts"])

    out = capsys.readouterr().out
    assert "Workstation Baseline" in out
    assert "Scripts" in out


def test_parse_no_report(core, data_dir):
    with pytest.raises(SystemExit):
        core.parse([str(data_dir / "not_a_report.xml")])


def test_parse_no_match(core, report_path, caplog):
    caplog.set_level("INFO")

    with pytest.raises(SystemExit):
        core.parse([str(report_path)], search="no-such-setting")

    assert "No settings were found" in caplog.text


def test_parse_invalid_search(core, report_path, caplog):
    with pytest.raises(SystemExit) as exit_info:
        core.parse([str(report_path)], search="[")

    assert exit_info.value.code == 1
    assert "Invalid search pattern '['" in caplog.text


def test_report(core, report_xml, capsys):
    core.generator = FakeGenerator({("name", "Workstation Baseline"): report_xml})

    core.report(names=["Workstation Baseline", "Missing"], extensions=["securityoptions"], print_json=True)

    records = json.loads(capsys.readouterr().out)
    assert core.generator.requested == [("name", "Workstation Baseline"), ("name", "Missing")]
    assert len(records) == 4
    assert records[0]["Setting"] == "Enabled"


def test_report_all(core, report_xml, capsys):
    guid = "{3B4F7A2C-9D1E-4F60-8A2B-5C6D7E8F9A01}"
    core.generator = FakeGenerator(
        {("guid", guid): report_xml},
        gpos=[{"Name": "Workstation Baseline", "GUID": guid}],
    )

    core.report(all_gpos=True, print_json=True)

    assert core.generator.requested == [("guid", guid)]
    assert len(json.loads(capsys.readouterr().out)) == 17


def test_report_not_a_gpo_report(core, caplog):
    core.generator = FakeGenerator({("name", "Odd"): "<Rsop/>"})

    with pytest.raises(SystemExit):
        core.report(names=["Odd"])

    assert "Skipping the report of 'Odd', it is not a GPO report" in caplog.text


def test_report_malformed_is_logged_once(core, caplog):
    core.generator = FakeGenerator({("name", "Broken"): "<GPO><Name>broken</GPO>"})

    with pytest.raises(SystemExit):
        core.report(names=["Broken"])

    warnings = [record for record in caplog.records if record.levelname == "WARNING"]
    assert len(warnings) == 1
    assert "Could not parse the report of 'Broken'" in warnings[0].getMessage()


def test_list_gpos(core, capsys):
    core.generator = FakeGenerator(
        {},
        gpos=[
            {
                "Name": "Default Domain Policy",
                "GUID": "{31B2F340-016D-11D2-945F-00C04FB984F9}",
                "Status": "AllSettingsEnabled",
                "Created": None,
                "Modified": None,
            }
        ],
    )

    core.list_gpos(print_json=True)

    assert json.loads(capsys.readouterr().out)[0]["Name"] == "Default Domain Policy"
