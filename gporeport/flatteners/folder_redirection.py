from gporeport.utils.xml_utils import find_children, child_text


class FolderRedirectionFlattener:
    """Flatten Folder Redirection"""

    def __init__(self, translations):
        self.known_folders = translations.get("known_folders", {})
        self.policy_removal = translations.get("policy_removal", {})
        self.boolean = translations.get("boolean", {})

    def folder_name(self, folder_id):
        if not folder_id:
            return None
        known_id = "{" + folder_id.strip().strip("{").strip("}").upper() + "}"
        return self.known_folders.get(known_id, folder_id)

    def yes_no(self, value):
        if value is None:
            return None
        return self.boolean.get(value.lower(), value)

    def flatten(self, extension):
        """
        One record per folder and destination (one destination per security group)
        """

        output = []

        for folder in find_children(extension, "Folder"):
            removal = child_text(folder, "PolicyRemovalBehavior")

            settings = {
                "Folder": self.folder_name(child_text(folder, "Id")),
                "Destination": "",
                "Security Group": "",
                "Grant Exclusive Rights": self.yes_no(child_text(folder, "GrantExclusiveRights")),
                "Move Contents": self.yes_no(child_text(folder, "MoveContents")),
                "Follow Parent": self.yes_no(child_text(folder, "FollowParent")),
                "Policy Removal": self.policy_removal.get(removal, removal),
            }

            locations = find_children(folder, "Location")
            if not locations:
                output.append(settings)
                continue

            for location in locations:
                entry = dict(settings)
                entry["Destination"] = child_text(location, "DestinationPath", default="")
                entry["Security Group"] = child_text(location, "SecurityGroup", "Name") or child_text(
                    location, "SecurityGroup", "SID", default=""
                )
                output.append(entry)

        return output
