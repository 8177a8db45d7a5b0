import re
import csv
import json
from pathlib import Path
from importlib import resources

import yaml

from rich.tree import Tree
from rich.table import Table
from rich.console import Console
from rich.markup import escape
from platformdirs import user_config_dir

############################### Load config ###############################


def load_yaml_config(config, file_name=None):
    """Load the YAML configuration file."""

    # If a file name is provided only load this configuration file
    if file_name:

        if file_name.endswith(".yaml"):

            # Override configuration file with the one specified in the user's config folder
            override_file = override_configuration(file_name)

            # Load YAML file
            if override_file:
                with override_file.open("r", encoding="utf-8") as file:
                    return yaml.safe_load(file) or {}
            else:
                with resources.files(config).joinpath(file_name).open("r", encoding="utf-8") as file:
                    return yaml.safe_load(file) or {}

        return {}

    # Else load all the configuration files
    loaded_config = {}
    for config_file in resources.files(config).iterdir():
        if config_file.name.endswith(".yaml"):

            # Override configuration file with the one specified in the user's config folder
            override_file = override_configuration(config_file.name)
            if override_file:
                config_file = override_file

            # Load YAML file
            with config_file.open("r", encoding="utf-8") as file:
                tmp_config = yaml.safe_load(file) or {}

            loaded_config = loaded_config | tmp_config

    return loaded_config


def override_configuration(file_name):
    """
    Override configuration with custom configuration from the user configuration directory
    """

    path = Path(user_config_dir("gporeport"))
    if not path.is_dir():
        return None

    files = path.rglob(file_name)

    # Return the first found file path in the user's configuration
    for path in files:
        return path

    return None


############################### Record operations ###############################


def search_records(records, search_term: str):
    """
    Keep the records where at least one value matches the regex pattern
    """

    search_pattern = re.compile(search_term, re.IGNORECASE)

    matches = []
    for record in records:
        for value in record.values():
            if value is not None and search_pattern.search(str(value)):
                matches.append(record)
                break

    return matches


def group_records(records):
    """
    Nest flat records by GPO, scope and extension title for display
    """

    grouped = {}
    for record in records:
        gpo = f"{record.get('GUID')}: {record.get('GPO')}"
        grouped.setdefault(gpo, {}).setdefault(record.get("Scope"), {}).setdefault(record.get("Extension"), []).append(
            record
        )

    return grouped


############################### Export functions ###############################


def export_json(records, output_path):
    """
    Write the records to a JSON file
    """

    with open(output_path, "w", encoding="utf-8") as file:
        json.dump(records, file, indent=4)


def export_csv(records, output_path):
    """
    Write the records to a CSV file, columns are the union of all record keys
    """

    fieldnames = []
    for record in records:
        for key in record:
            if key not in fieldnames:
                fieldnames.append(key)

    with open(output_path, "w", encoding="utf-8", newline="") as file:
        writer = csv.DictWriter(file, fieldnames=fieldnames, restval="")
        writer.writeheader()
        for record in records:
            writer.writerow({key: "" if value is None else value for key, value in record.items()})


############################### Printing functions ###############################


def table_output_width():
    """
    Get the current terminal width for table output
    """
    table_width = Console().size.width

    if table_width - 20 > 1:
        table_width -= 20

    return table_width


def print_dict_as_tree(label, dictionary):
    """
    Recursively builds and prints a tree representation of the nested dictionary.
    """

    def dict_to_tree(data, parent, depth=0):
        for key, value in data.items():

            if isinstance(value, list):
                list_tree = None

                for i, item in enumerate(value):

                    if isinstance(item, dict):
                        item_tree = parent.add(f"[bold blue]{key} {i+1} [/bold blue]")
                        dict_to_tree(item, item_tree, depth + 1)
                    else:
                        if not list_tree:
                            if depth == 0:
                                list_tree = parent.add(f"[bold red]{key} [/bold red]")
                            else:
                                list_tree = parent.add(f"[bold blue]{key} [/bold blue]")
                        list_tree.add(f"[bold]{item} [/bold]")

            elif isinstance(value, dict):

                if depth == 0:
                    node = parent.add(f"[bold red]{key} [/bold red]")
                else:
                    node = parent.add(f"[bold blue]{key} [/bold blue]")
                dict_to_tree(value, node, depth + 1)

            else:
                parent.add(f"[bold blue]{key} [/bold blue]: [bold]{value} [/bold]")

    tree = Tree(label=f"[bold]{label} [/bold]")
    dict_to_tree(dictionary, tree)
    console = Console()
    console.print(tree)


def print_records(records, extensions_config):
    """
    Print records as one table per GPO, scope and extension.
    """

    columns_by_title = {ext.get("title"): ext.get("columns", []) for ext in extensions_config.values()}

    tree = Tree("[bold]GPO Settings [/bold]")

    for gpo, scopes in group_records(records).items():
        gpo_node = tree.add(f"[bold red]{gpo} [/bold red]")

        for scope, extensions in scopes.items():
            scope_node = gpo_node.add(f"[bold blue]{scope} [/bold blue]")

            for extension, ext_records in extensions.items():
                node = scope_node.add(f"[bold blue]{extension} [/bold blue]")

                columns = columns_by_title.get(extension)
                if not columns:
                    columns = [key for key in ext_records[0] if key not in ("GPO", "GUID", "Scope", "Extension")]

                table = Table(show_lines=True, width=int(table_output_width() * 0.90))
                for column in columns:
                    table.add_column(column, justify="center", overflow="fold")

                for record in ext_records:
                    values = ["" if record.get(column) is None else str(record.get(column)) for column in columns]
                    table.add_row(*[escape(value) for value in values])

                node.add(table)

    console = Console()
    console.print(tree)
