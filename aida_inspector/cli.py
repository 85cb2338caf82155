#!/usr/bin/env python3
#
# Copyright (C) 2022 Intel Corporation.
#
# SPDX-License-Identifier: BSD-3-Clause
#

import sys
import logging
import argparse
import lxml.etree

from aida_inspector.cpuparser.cpuids import LEAF_1
from aida_inspector.cpuparser.msr import MSR_IA32_FEATURE_CONTROL
from aida_inspector.cpuparser.native import NativeCpuInformation
from aida_inspector.dumpparser import parse_dump, ParseError
from aida_inspector.features import default_features, evaluate_features
from aida_inspector.inspectorlib import external_tools
from aida_inspector.report import text_report, xml_report

def check_cpu_info(cpu_info):
    leaf_1 = LEAF_1.read(cpu_info)
    if leaf_1 is not None and leaf_1.hypervisor != 0:
        logging.warning("The CPUID data was captured inside a Virtual Machine (VM). " \
                        "The features reported are those exposed by the hypervisor, not by the processor.")

    feature_control = MSR_IA32_FEATURE_CONTROL.read(cpu_info)
    if feature_control is not None and feature_control.disable_vmx:
        logging.warning("VMX is locked off in IA32_FEATURE_CONTROL. Enable VT-x in the BIOS " \
                        "to use the virtualization features reported below.")

def load_cpu_info(args):
    if args.native:
        if not external_tools.locate_tools(["cpuid"]):
            sys.exit(1)
        return NativeCpuInformation(args.cpu)

    if args.input:
        try:
            with open(args.input, "rb") as f:
                data = f.read()
        except OSError as e:
            logging.critical(f"Cannot read the CPUID dump: {e}")
            sys.exit(1)
    else:
        data = sys.stdin.buffer.read()

    try:
        return parse_dump(data)
    except ParseError as e:
        logging.critical(e)
        sys.exit(1)

def write_report(args, cpu_info, results):
    if args.format == "xml":
        tree = xml_report(cpu_info, results)
        if args.out:
            tree.write(args.out, pretty_print=True, xml_declaration=True, encoding="UTF-8")
        else:
            sys.stdout.write(lxml.etree.tostring(tree, pretty_print=True, encoding="unicode"))
    else:
        report = text_report(cpu_info, results)
        if args.out:
            with open(args.out, "w", encoding="UTF-8") as f:
                f.write(report)
        else:
            sys.stdout.write(report)

def main(args):
    cpu_info = load_cpu_info(args)
    check_cpu_info(cpu_info)

    results = evaluate_features(default_features(), cpu_info)
    write_report(args, cpu_info, results)
    return 0

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Report the virtualization and instruction set features recorded in an AIDA64 CPUID dump.")
    parser.add_argument("input", nargs="?", default=None, help="the AIDA64 CPUID dump to inspect (default: standard input)")
    parser.add_argument("--out", help="the name of the report file (default: standard output)")
    parser.add_argument("--format", choices=["text", "xml"], default="text", help="the format of the report")
    parser.add_argument("--native", action="store_true", default=False, help="inspect the processor of this machine instead of a dump")
    parser.add_argument("--cpu", type=int, default=0, help="the logical CPU to inspect with --native")
    parser.add_argument("--loglevel", default="warning", help="choose log level, e.g. debug, info, warning, error or critical")
    return parser.parse_args(argv)

stream_handler = None

def setup_logging(loglevel):
    global stream_handler

    logger = logging.getLogger()
    logger.setLevel(loglevel.upper())
    formatter = logging.Formatter('%(asctime)s-%(name)s-%(levelname)s:-%(message)s', datefmt='%Y-%m-%d %H:%M:%S')

    # Only one handler of ours at a time when run() is invoked repeatedly.
    if stream_handler is not None:
        logger.removeHandler(stream_handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(loglevel.upper())
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

def run(argv=None):
    args = parse_args(argv)
    try:
        setup_logging(args.loglevel)
    except ValueError:
        print(f"{args.loglevel} is not a valid log level")
        print(f"Valid log levels (non case-sensitive): critical, error, warning, info, debug")
        sys.exit(1)

    sys.exit(main(args))

if __name__ == "__main__":
    run()
