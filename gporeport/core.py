import re
import json
import sys
import logging

from gporeport.parser import GPOReportParser
from gporeport.flattener import GPOFlattener
from gporeport.generator import ReportGenerator, ReportGenerationError

from gporeport.utils.utils import (
    load_yaml_config,
    search_records,
    print_records,
    print_dict_as_tree,
    export_csv,
    export_json,
)


class GPOReportCore:
    """
    Class for generation, parsing and flattening of GPO reports
    """

    def __init__(
        self,
        powershell="powershell",
        domain=None,
        server=None,
        timeout=300,
        workers=4,
    ):

        # Translation tables and extension layout
        self.translations = load_yaml_config("gporeport.config", "translations.yaml")
        self.extensions_config = load_yaml_config("gporeport.config", "extensions.yaml")

        # Platform report generator
        self.generator = ReportGenerator(powershell, domain, server, timeout, workers)

        # Report parser and flattener
        self.parser = GPOReportParser()
        self.flattener = GPOFlattener(self.translations, self.extensions_config)

    def list_gpos(self, print_json=False):
        """
        List the GPOs of the domain
        """

        try:
            gpos = self.generator.list_gpos()
        except ReportGenerationError as error:
            logging.error("Could not list the GPOs: %s", error)
            sys.exit(1)

        if not gpos:
            logging.info("No GPOs were found...")
            sys.exit()

        if print_json:
            print(json.dumps(gpos, indent=4))
        else:
            output = {}
            for gpo in gpos:
                output[f"{gpo['GUID']}: {gpo['Name']}"] = {
                    key: gpo[key] for key in ("Status", "Created", "Modified")
                }
            print_dict_as_tree("GPOs", output)

    def report(
        self,
        names=None,
        guids=None,
        all_gpos=False,
        extensions=None,
        scopes=None,
        search=None,
        print_json=False,
        csv_path=None,
        json_path=None,
    ):
        """
        Generate the reports of the selected GPOs and output their flattened settings
        """

        targets = [("name", name) for name in names or []] + [("guid", guid) for guid in guids or []]

        if all_gpos:
            try:
                targets = [("guid", gpo["GUID"]) for gpo in self.generator.list_gpos()]
            except ReportGenerationError as error:
                logging.error("Could not list the GPOs: %s", error)
                sys.exit(1)

        if not targets:
            logging.info("No GPOs were found...")
            sys.exit()

        reports = []
        for target, xml_report in self.generator.generate_many(targets).items():
            report = self.parser.parse_string(xml_report, f"the report of '{target[1]}'")
            if report:
                reports.append(report)

        self.output(reports, extensions, scopes, search, print_json, csv_path, json_path)

    def parse(
        self,
        paths,
        extensions=None,
        scopes=None,
        search=None,
        print_json=False,
        csv_path=None,
        json_path=None,
    ):
        """
        Flatten reports previously saved as XML files
        """

        reports = []
        for file_path in self.parser.find_report_files(paths):
            report = self.parser.parse_file(file_path)
            if report:
                reports.append(report)

        self.output(reports, extensions, scopes, search, print_json, csv_path, json_path)

    def flatten(self, reports, extensions=None, scopes=None, search=None):
        """
        Flatten and filter the settings of the parsed reports
        """

        records = []
        for report in reports:
            records.extend(self.flattener.flatten(report, extensions, scopes))

        # Searches in the records with a regex
        if search:
            try:
                records = search_records(records, search)
            except re.error as error:
                logging.error("Invalid search pattern '%s': %s", search, error)
                sys.exit(1)

        return records

    def output(self, reports, extensions, scopes, search, print_json, csv_path, json_path):
        """
        Print or export the flattened settings
        """

        if not reports:
            logging.info("No GPO reports were found...")
            sys.exit()

        records = self.flatten(reports, extensions, scopes, search)

        if not records:
            logging.info("No settings were found for the given filter(s)...")
            sys.exit()

        if csv_path:
            export_csv(records, csv_path)
            logging.info("%d settings written to %s", len(records), csv_path)

        if json_path:
            export_json(records, json_path)
            logging.info("%d settings written to %s", len(records), json_path)

        if print_json:
            print(json.dumps(records, indent=4))
        elif not (csv_path or json_path):
            print_records(records, self.extensions_config)
