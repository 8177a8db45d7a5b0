from gporeport.utils.gpp import decrypt_gpppassword
from gporeport.utils.xml_utils import iter_local, find_child, child_text, get_attribute


class DriveMapsFlattener:
    """Flatten Drive Maps preferences"""

    def __init__(self, translations):
        self.action_type = translations.get("drive_action", {})
        self.this_drive = translations.get("this_drive", {})
        self.all_drives = translations.get("all_drives", {})
        self.boolean = translations.get("boolean", {})

    def drive_letter(self, properties):
        """
        "useLetter" set to 0 means the first free letter starting at "letter" is used
        """

        letter = get_attribute(properties, "letter", "")
        if letter and get_attribute(properties, "useLetter", "1") == "0":
            return f"First available, starting at {letter}:"
        if letter:
            return f"{letter}:"
        return None

    def flatten(self, extension):
        """
        One record per mapped drive, drives in collections included
        """

        output = []

        for drive in iter_local(extension, "Drive"):
            properties = find_child(drive, "Properties")
            if properties is None:
                continue

            action = get_attribute(properties, "action", "U")
            this_drive = get_attribute(properties, "thisDrive", "NOCHANGE")
            all_drives = get_attribute(properties, "allDrives", "NOCHANGE")
            persistent = get_attribute(properties, "persistent", "0")
            cpassword = get_attribute(properties, "cpassword")

            filters = find_child(drive, "Filters")

            output.append(
                {
                    "Order": child_text(drive, "GPOSettingOrder"),
                    "Drive": self.drive_letter(properties) or get_attribute(drive, "name"),
                    "Action": self.action_type.get(action, action),
                    "Path": get_attribute(properties, "path"),
                    "Label": get_attribute(properties, "label", ""),
                    "Reconnect": self.boolean.get(persistent, persistent),
                    "This Drive": self.this_drive.get(this_drive, this_drive),
                    "All Drives": self.all_drives.get(all_drives, all_drives),
                    "User Name": get_attribute(properties, "userName", ""),
                    "Password": decrypt_gpppassword(cpassword) if cpassword else "",
                    "Filters": "Yes" if filters is not None and len(filters) else "No",
                }
            )

        return output
