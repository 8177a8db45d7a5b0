import os
import re
import codecs
import logging
import xml.etree.ElementTree as ET

from gporeport.utils.xml_utils import local_name, find_child, find_children, child_text, xsi_type


class GPOReportParser:
    """
    Class to read Group Policy Settings reports (Get-GPOReport -ReportType Xml)
    """

    def __init__(self):
        self.scopes = ["Computer", "User"]
        # Drop the (UTF-16) encoding declaration from already decoded reports
        self.declaration_pattern = re.compile(r"^\s*<\?xml[^>]*\?>")

    def parse_string(self, xml_text, source="the GPO report"):
        """
        Parse a report held in memory, "source" names it in the log messages
        """

        xml_text = xml_text.lstrip("\ufeff")
        xml_text = self.declaration_pattern.sub("", xml_text, count=1)

        try:
            root = ET.fromstring(xml_text)
        except ET.ParseError as error:
            logging.warning("Could not parse %s: %s", source, error)
            return None

        report = self.parse_root(root)
        if report is None:
            logging.warning("Skipping %s, it is not a GPO report", source)

        return report

    def parse_file(self, file_path):
        """
        Parse a report saved on disk (Get-GPOReport -Path or piped to Out-File)
        """

        try:
            tree = ET.parse(file_path)
        except ET.ParseError as error:
            # Out-File re-encodes the report but keeps its UTF-16 declaration
            logging.debug("Could not parse %s as declared (%s), decoding it", file_path, error)
            xml_text = self.read_text(file_path)
            if xml_text is None:
                return None
            return self.parse_string(xml_text, file_path)

        report = self.parse_root(tree.getroot())
        if report is None:
            logging.debug("%s is not a GPO report", file_path)

        return report

    def read_text(self, file_path):
        """
        Decode a report file from its BOM, UTF-8 without one
        """

        with open(file_path, "rb") as file:
            data = file.read()

        if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
            encoding = "utf-16"
        else:
            encoding = "utf-8-sig"

        try:
            return data.decode(encoding)
        except UnicodeDecodeError as error:
            logging.warning("Could not decode %s: %s", file_path, error)
            return None

    def find_report_files(self, paths):
        """
        Expand the given files and directories into a list of XML files
        """

        files = []
        for path in paths:
            if os.path.isdir(path):
                for root, _, filenames in os.walk(path):
                    for filename in sorted(filenames):
                        if filename.lower().endswith(".xml"):
                            files.append(os.path.join(root, filename))
            elif os.path.isfile(path):
                files.append(path)
            else:
                logging.warning("'%s' does not exist.", path)

        return files

    def parse_root(self, root):
        """
        Extract the GPO metadata and the extension elements of each scope
        """

        if local_name(root.tag) != "GPO":
            return None

        guid = child_text(root, "Identifier", "Identifier")
        if guid:
            guid = "{" + guid.strip("{").strip("}").upper() + "}"

        report = {
            "Name": child_text(root, "Name"),
            "GUID": guid,
            "Domain": child_text(root, "Identifier", "Domain"),
            "Created": child_text(root, "CreatedTime"),
            "Modified": child_text(root, "ModifiedTime"),
            "Read": child_text(root, "ReadTime"),
            "Links": self.parse_links(root),
        }

        for scope in self.scopes:
            report[scope] = self.parse_scope(find_child(root, scope))

        return report

    def parse_links(self, root):
        """
        Containers (Scope Of Management) the GPO is linked to
        """

        links = []
        for link in find_children(root, "LinksTo"):
            links.append(
                {
                    "Location": child_text(link, "SOMPath"),
                    "Enabled": child_text(link, "Enabled"),
                    "NoOverride": child_text(link, "NoOverride"),
                }
            )
        return links

    def parse_scope(self, element):
        """
        Computer or User configuration block
        """

        scope = {"Enabled": None, "VersionDirectory": None, "VersionSysvol": None, "Extensions": []}

        if element is None:
            return scope

        scope["Enabled"] = child_text(element, "Enabled")
        scope["VersionDirectory"] = child_text(element, "VersionDirectory")
        scope["VersionSysvol"] = child_text(element, "VersionSysvol")

        for extension_data in find_children(element, "ExtensionData"):
            extension = find_child(extension_data, "Extension")
            if extension is None:
                continue

            scope["Extensions"].append(
                {
                    "type": xsi_type(extension),
                    "name": child_text(extension_data, "Name"),
                    "element": extension,
                }
            )

        return scope
