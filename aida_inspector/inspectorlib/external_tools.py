# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

import os
import logging
import subprocess # nosec

available_tools = {}

system_paths = [
    "/usr/bin/",
    "/usr/sbin/",
    "/usr/local/bin/",
    "/usr/local/sbin/",
]

class ExecutableNotFound(ValueError):
    def __init__(self, name):
        super().__init__(f"'{name}' has not been located on this system")
        self.name = name

def run(command, **kwargs):
    """Run a previously located tool. The command is a list whose first item names the tool."""
    try:
        full_path = available_tools[command[0]]
    except KeyError:
        raise ExecutableNotFound(command[0])

    kwargs.setdefault("capture_output", True)
    return subprocess.run([full_path] + [str(arg) for arg in command[1:]], **kwargs) # nosec

def detect_tool(name):
    """Detect the full path of a system tool under the common executable paths."""
    for path in system_paths:
        candidate = os.path.join(path, name)
        if os.path.isfile(candidate) and os.access(candidate, os.X_OK):
            logging.debug(f"Use {name} found at {candidate}.")
            return candidate

    logging.critical(f"'{name}' cannot be found. Please install it and run again.")
    return None

def locate_tools(tool_list):
    """Find a list of tools under common system executable paths. Return True if and only if all tools are found."""
    had_error = False

    for tool in tool_list:
        full_path = detect_tool(tool)
        if full_path != None:
            available_tools[tool] = full_path
        else:
            had_error = True

    return not had_error
