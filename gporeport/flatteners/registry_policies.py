from gporeport.utils.xml_utils import find_children, find_child, child_text, local_name


class RegistryPoliciesFlattener:
    """Flatten Administrative Templates (Registry Policies)"""

    def __init__(self):
        self.option_types = ["DropDownList", "EditText", "Numeric", "CheckBox", "ListBox", "MultiText"]

    def option_value(self, option):
        """
        Value of a policy option, depends on the option type
        """

        option_type = local_name(option.tag)

        if option_type == "CheckBox":
            return child_text(option, "State")

        if option_type == "DropDownList":
            return child_text(option, "Value", "Name")

        if option_type == "ListBox":
            elements = []
            value = find_child(option, "Value")
            if value is not None:
                for element in find_children(value, "Element"):
                    name = child_text(element, "Name")
                    data = child_text(element, "Data", default="")
                    elements.append(f"{name}={data}" if name else data)
            return ", ".join(elements)

        if option_type == "MultiText":
            value = find_child(option, "Value")
            if value is not None:
                return ", ".join((string.text or "").strip() for string in find_children(value, "String"))
            return ""

        # EditText and Numeric
        return child_text(option, "Value", default="")

    def flatten_policy(self, policy):
        """
        Administrative template setting
        """

        options = []
        for option in policy:
            if local_name(option.tag) in self.option_types:
                name = (child_text(option, "Name") or "").rstrip(":")
                options.append(f"{name}: {self.option_value(option)}")

        return {
            "Policy": child_text(policy, "Name"),
            "State": child_text(policy, "State"),
            "Category": child_text(policy, "Category"),
            "Supported": child_text(policy, "Supported"),
            "Options": "; ".join(options),
        }

    def flatten_registry_setting(self, setting):
        """
        Registry value not described by an ADMX template
        """

        value = find_child(setting, "Value")
        data = ""
        if value is not None:
            name = child_text(value, "Name", default="")
            raw = child_text(value, "Number")
            if raw is None:
                raw = child_text(value, "String", default="")
            data = f"{name}: {raw}"

        return {
            "Policy": child_text(setting, "KeyPath"),
            "State": "Extra Registry Setting",
            "Category": None,
            "Supported": None,
            "Options": data,
        }

    def flatten(self, extension):
        """
        One record per policy, extra registry settings last
        """

        output = [self.flatten_policy(policy) for policy in find_children(extension, "Policy")]
        output.extend(self.flatten_registry_setting(setting) for setting in find_children(extension, "RegistrySetting"))

        return output
