# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

import re
import lxml.etree

from aida_inspector.cpuparser.cpuids import LEAF_1

UNKNOWN = "Unknown"

def tristate_to_char(value):
    if value is None:
        return "?"
    return "Y" if value else "N"

def tristate_to_str(value):
    if value is None:
        return "unknown"
    return "y" if value else "n"

def xml_text(value):
    """Replace characters that XML 1.0 cannot carry and trim surrounding blanks."""
    return re.sub(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]+", " ", value).strip()

def add_child(element, tag, text=None, **kwargs):
    child = lxml.etree.Element(tag)
    child.text = text
    for k,v in kwargs.items():
        child.set(k, v)
    element.append(child)
    return child

def text_report(cpu_info, results):
    """Render (name, result) pairs as the vendor and model line followed by one Y/N/? line per feature."""
    lines = [
        "{} {}".format(cpu_info.vendor_name() or UNKNOWN, cpu_info.model_name() or UNKNOWN),
        "",
    ]
    for name, value in results:
        lines.append("{:30}: {}".format(name, tristate_to_char(value)))
    return "\n".join(lines) + "\n"

def xml_report(cpu_info, results):
    """Render (name, result) pairs as an lxml element tree rooted at <cpu-features>."""
    root = lxml.etree.Element("cpu-features")
    root.set("vendor", xml_text(cpu_info.vendor_name() or UNKNOWN))
    root.set("model", xml_text(cpu_info.model_name() or UNKNOWN))

    leaf_1 = LEAF_1.read(cpu_info)
    if leaf_1 is not None:
        add_child(root, "signature",
                  family_id=f"{leaf_1.display_family:#x}",
                  model_id=f"{leaf_1.display_model:#x}",
                  stepping_id=f"{leaf_1.stepping:#x}")

    for name, value in results:
        add_child(root, "feature", name=xml_text(name), present=tristate_to_str(value))

    return lxml.etree.ElementTree(root)
