from gporeport.utils.xml_utils import find_children, child_text


class ScriptsFlattener:
    """Flatten Scripts (Logon, Logoff, Startup, Shutdown)"""

    def __init__(self, translations):
        self.run_order = translations.get("script_run_order", {})

    def flatten(self, extension):
        """
        One record per script, in the order defined in the GPO
        """

        output = []

        for script in find_children(extension, "Script"):
            run_order = child_text(script, "RunOrder")

            output.append(
                {
                    "Type": child_text(script, "Type"),
                    "Order": child_text(script, "Order"),
                    "Command": child_text(script, "Command"),
                    "Parameters": child_text(script, "Parameters", default=""),
                    "Run Order": self.run_order.get(run_order, run_order),
                }
            )

        return output
