from gporeport.utils.xml_utils import iter_local, find_child, find_children, child_text, local_name


class SecurityOptionsFlattener:
    """Flatten the Security Options of the Security Settings extension"""

    def display_value(self, display):
        """
        Render the <Display> block the way the Group Policy Management Console shows it
        """

        for child in display:
            tag = local_name(child.tag)
            text = (child.text or "").strip()

            if tag == "DisplayBoolean":
                return "Enabled" if text.lower() == "true" else "Disabled"

            if tag == "DisplayString":
                return text

            if tag == "DisplayNumber":
                units = child_text(display, "Units")
                return f"{text} {units}" if units else text

            if tag == "DisplayFields":
                fields = []
                for field in find_children(child, "Field"):
                    fields.append(f"{child_text(field, 'Name')}: {child_text(field, 'Value', default='')}")
                return "; ".join(fields)

            if tag == "DisplayStrings":
                return "; ".join((value.text or "").strip() for value in find_children(child, "Value"))

        return None

    def flatten(self, extension):
        """
        One record per security option
        """

        output = []

        for option in iter_local(extension, "SecurityOptions"):
            key_name = child_text(option, "KeyName")
            policy_name = child_text(option, "SystemAccessPolicyName")

            setting = None
            display = find_child(option, "Display")
            if display is not None:
                setting = self.display_value(display)

            if setting is None:
                setting = child_text(option, "SettingNumber")
            if setting is None:
                setting = child_text(option, "SettingString")
            if setting is None and find_child(option, "SettingStrings") is not None:
                setting = "; ".join(
                    (value.text or "").strip() for value in find_children(find_child(option, "SettingStrings"), "Value")
                )

            output.append(
                {
                    "Policy": child_text(option, "Display", "Name") or key_name or policy_name,
                    "Key": key_name or policy_name,
                    "Setting": setting,
                }
            )

        return output
