"""
Namespace agnostic helpers for the Group Policy Settings report.

The report declares a new prefix (q1, q2...) for every extension namespace,
elements are therefore matched on their local name only.
"""

XSI_TYPE = "{http://www.w3.org/2001/XMLSchema-instance}type"


def local_name(tag):
    """Strip the namespace from an element tag or attribute name"""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]


def find_children(element, name):
    """Direct children of an element with the given local name"""
    return [child for child in element if local_name(child.tag) == name]


def find_child(element, name):
    """First direct child of an element with the given local name"""
    for child in element:
        if local_name(child.tag) == name:
            return child
    return None


def find_path(element, *names):
    """Follow a path of local names through direct children"""
    for name in names:
        if element is None:
            return None
        element = find_child(element, name)
    return element


def child_text(element, *names, default=None):
    """Stripped text of the element found at the path of local names"""
    found = find_path(element, *names)
    if found is None or found.text is None:
        return default
    return found.text.strip()


def iter_local(element, name):
    """All descendants (and the element itself) with the given local name"""
    return [item for item in element.iter() if local_name(item.tag) == name]


def get_attribute(element, name, default=None):
    """Attribute value looked up by local name"""
    if element is None:
        return default
    if name in element.attrib:
        return element.attrib[name]
    for key, value in element.attrib.items():
        if local_name(key) == name:
            return value
    return default


def xsi_type(element):
    """Local part of the xsi:type attribute ("q1:Scripts" -> "Scripts")"""
    value = element.attrib.get(XSI_TYPE)
    if not value:
        return None
    return value.split(":", 1)[-1]
