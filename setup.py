"""
setup.py for aida-inspector and its associated libraries.
"""

import os
from setuptools import setup

setup(
    name="aida_inspector",
    version=os.environ.get("AIDA_INSPECTOR_VERSION", "0.1.0"),
    description="AIDA64 CPUID dump inspector",
    long_description="aida-inspector reads AIDA64 CPUID dumps and reports which virtualization and instruction set features the captured processor has.",
    license="BSD-3-Clause",
    python_requires=">=3.7",
    packages=[
        "aida_inspector",
        "aida_inspector.cpuparser",
        "aida_inspector.dumpparser",
        "aida_inspector.features",
        "aida_inspector.inspectorlib",
    ],
    install_requires=[
        "lxml",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "aida-inspector = aida_inspector.cli:run",
        ],
    },
)
