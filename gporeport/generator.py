import json
import logging
import subprocess
from concurrent.futures import ThreadPoolExecutor, as_completed


class ReportGenerationError(Exception):
    """Raised when the platform could not produce a report"""


class ReportGenerator:
    """
    Render GPO reports through the GroupPolicy PowerShell module
    """

    def __init__(self, powershell="powershell", domain=None, server=None, timeout=300, workers=4):
        self.powershell = powershell
        self.domain = domain
        self.server = server
        self.timeout = timeout
        self.workers = max(1, int(workers or 1))

    @staticmethod
    def quote(value):
        """
        Quote a value as a PowerShell single-quoted string
        """
        return "'" + str(value).replace("'", "''") + "'"

    @staticmethod
    def normalize_guid(guid):
        """
        Strip braces and whitespace from a GUID
        """
        return guid.strip().strip("{").strip("}").lower()

    def target_options(self):
        """
        -Domain and -Server options shared by the GroupPolicy cmdlets
        """

        options = ""
        if self.domain:
            options += f" -Domain {self.quote(self.domain)}"
        if self.server:
            options += f" -Server {self.quote(self.server)}"
        return options

    def run_powershell(self, script):
        """
        Run a PowerShell script and return its standard output
        """

        # Force UTF-8 so non ASCII GPO names survive the pipe
        command = (
            "$ErrorActionPreference = 'Stop'; "
            "[Console]::OutputEncoding = [System.Text.Encoding]::UTF8; "
            "Import-Module GroupPolicy; " + script
        )

        logging.debug("Running PowerShell: %s", script)

        try:
            result = subprocess.run(
                [self.powershell, "-NoProfile", "-NonInteractive", "-Command", command],
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as error:
            raise ReportGenerationError(f"PowerShell executable '{self.powershell}' not found") from error
        except subprocess.TimeoutExpired as error:
            raise ReportGenerationError(f"PowerShell command timed out after {self.timeout} seconds") from error

        if result.returncode != 0:
            raise ReportGenerationError(result.stderr.strip() or f"PowerShell exited with code {result.returncode}")

        return result.stdout

    def list_gpos(self):
        """
        List the GPOs of the domain
        """

        script = (
            f"Get-GPO -All{self.target_options()} | Select-Object "
            "DisplayName, @{n='Id';e={$_.Id.ToString()}}, @{n='GpoStatus';e={$_.GpoStatus.ToString()}}, "
            "@{n='CreationTime';e={$_.CreationTime.ToString('s')}}, "
            "@{n='ModificationTime';e={$_.ModificationTime.ToString('s')}} | ConvertTo-Json -Compress"
        )

        output = self.run_powershell(script).strip()
        if not output:
            return []

        try:
            gpos = json.loads(output)
        except json.JSONDecodeError as error:
            raise ReportGenerationError(f"Unexpected output from Get-GPO: {error}") from error

        # ConvertTo-Json returns an object instead of a list for a single GPO
        if isinstance(gpos, dict):
            gpos = [gpos]

        output = []
        for gpo in gpos:
            output.append(
                {
                    "Name": gpo.get("DisplayName"),
                    "GUID": "{" + self.normalize_guid(gpo.get("Id", "")).upper() + "}",
                    "Status": gpo.get("GpoStatus"),
                    "Created": gpo.get("CreationTime"),
                    "Modified": gpo.get("ModificationTime"),
                }
            )

        return output

    def generate(self, name=None, guid=None):
        """
        Render the XML report of a GPO.
        A failure is logged and None is returned so the caller can continue with the other GPOs.
        """

        if guid:
            selector = f"-Guid {self.quote(self.normalize_guid(guid))}"
            target = guid
        elif name:
            selector = f"-Name {self.quote(name)}"
            target = name
        else:
            raise ValueError("A GPO name or GUID is required")

        script = f"Get-GPOReport {selector} -ReportType Xml{self.target_options()}"

        try:
            report = self.run_powershell(script)
        except ReportGenerationError as error:
            logging.warning("Could not generate the report of '%s': %s", target, error)
            return None

        if not report.strip():
            logging.warning("Empty report returned for '%s'", target)
            return None

        return report

    def generate_many(self, targets):
        """
        Render several reports in parallel.
        Targets are (kind, value) tuples where kind is "name" or "guid".
        Returns a dictionary of target -> XML report, failed targets are left out.
        """

        reports = {}

        with ThreadPoolExecutor(max_workers=self.workers) as executor:
            futures = {
                executor.submit(self.generate, **{kind: value}): (kind, value) for kind, value in targets
            }

            for future in as_completed(futures):
                target = futures[future]
                try:
                    report = future.result()
                except ValueError as error:
                    logging.warning("Skipping the %s '%s': %s", *target, error)
                    continue
                if report:
                    reports[target] = report

        # Keep the requested order
        return {target: reports[target] for target in targets if target in reports}
