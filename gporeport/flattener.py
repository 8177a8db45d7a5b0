import logging

from gporeport.flatteners.scripts import ScriptsFlattener
from gporeport.flatteners.drive_maps import DriveMapsFlattener
from gporeport.flatteners.security_options import SecurityOptionsFlattener
from gporeport.flatteners.registry_policies import RegistryPoliciesFlattener
from gporeport.flatteners.folder_redirection import FolderRedirectionFlattener


class GPOFlattener:
    """
    Flatten the extensions of a GPO report into one record per setting
    """

    def __init__(self, translations, extensions_config):
        self.extensions_config = extensions_config

        self.flatteners = {}
        self.flatteners["Scripts"] = ScriptsFlattener(translations).flatten
        self.flatteners["DriveMapSettings"] = DriveMapsFlattener(translations).flatten
        self.flatteners["SecuritySettings"] = SecurityOptionsFlattener().flatten
        self.flatteners["RegistrySettings"] = RegistryPoliciesFlattener().flatten
        self.flatteners["FolderRedirectionSettings"] = FolderRedirectionFlattener(translations).flatten

    def flatten(self, report, extensions=None, scopes=None):
        """
        Flatten the Computer and User settings of a parsed report.
        "extensions" filters on extension keys (scripts, drivemaps...), "scopes" on computer/user.
        """

        output = []

        for scope in ["Computer", "User"]:
            if scopes and scope.lower() not in scopes:
                continue

            for extension in report.get(scope, {}).get("Extensions", []):
                extension_type = extension.get("type")
                flattener = self.flatteners.get(extension_type)

                if not flattener:
                    logging.debug("No flattener for the '%s' extension", extension.get("name") or extension_type)
                    continue

                config = self.extensions_config.get(extension_type, {})
                if extensions and config.get("key") not in extensions:
                    continue

                common = {
                    "GPO": report.get("Name"),
                    "GUID": report.get("GUID"),
                    "Scope": scope,
                    "Extension": config.get("title", extension_type),
                }

                for settings in flattener(extension["element"]):
                    output.append(common | settings)

        return output
