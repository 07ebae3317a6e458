#!/usr/bin/env python3
"""
WSDL Wrangler

This script reads a WSDL 1.1 service description (with its embedded XML Schema) and
generates a typed Python client module: dataclass records and Enums for the schema types
and one client class per service whose methods delegate to a SOAP transport.

Usage:
    python wsdl_wrangler.py parse <wsdl> [--verbose] [--dump <file>]
    python wsdl_wrangler.py generate <wsdl> [--output <dir>] [--client-name <name>]
                                            [--soap-version <1.1|1.2|auto>] [--module-name <name>]
                                            [--generate-tests] [--verbose]
    python wsdl_wrangler.py info <wsdl> [--json]

Commands:
    parse           : Validate the WSDL and report warnings (--verbose prints the parsed structure,
                      --dump writes it to a file)
    generate        : Write <module-name>.py (default soap_client.py) to the output directory
    info            : Print a short summary of the service (--json dumps the whole model)

Environment overrides:
    WW_OUTPUT_DIR, WW_CLIENT_NAME, WW_SOAP_VERSION, WW_MODULE_NAME, WW_VERBOSE

Example:
    python wsdl_wrangler.py generate calculator.wsdl --output ./generated --client-name CalculatorClient
    python wsdl_wrangler.py generate calculator.wsdl -o ./generated -s 1.2 --generate-tests
"""

import argparse
import os
import sys
from enum import Enum
from typing import List, Optional

from codegen_errors import CodegenError, FileReadError, FileWriteError, MissingConfigurationError
from model_debug import debug_print_model, model_details, model_summary, model_to_json
from service_model import ServiceModel
from wsdl_parser import WsdlParser
from generators.python_client_generator import (
    DEFAULT_MODULE_NAME,
    GenerationOptions,
    generate_client_code,
    generate_smoke_test_code,
)


class SoapVersion(Enum):
    SOAP11 = "1.1"
    SOAP12 = "1.2"
    AUTO = "auto"

    @classmethod
    def parse(cls, text: str) -> 'SoapVersion':
        value = (text or "").strip().lower()
        if value in ("1.1", "11", "soap11"):
            return cls.SOAP11
        if value in ("1.2", "12", "soap12"):
            return cls.SOAP12
        if value == "auto":
            return cls.AUTO
        raise ValueError(f"Invalid SOAP version '{text}' (expected 1.1, 1.2 or auto)")


class GeneratedCode:
    def __init__(self, output_file: str, code: str, warnings: List[str], test_file: Optional[str] = None):
        self.output_file = output_file
        self.code = code
        self.warnings = warnings
        self.test_file = test_file


class WsdlClientGenerator:
    """
    Reads a WSDL file and writes the generated client module into an output directory.
    """

    def __init__(
        self,
        wsdl_path: str,
        out_dir: str,
        module_name: Optional[str] = None,
        client_name: Optional[str] = None,
        generate_tests: bool = False,
        soap_version: SoapVersion = SoapVersion.AUTO,
        verbose: bool = False,
    ):
        """
        Args:
            wsdl_path: Path to the WSDL document
            out_dir: Directory where the module is written (created if missing)
            module_name: Name of the generated module without extension (default: soap_client)
            client_name: Class name for the first service's client
            generate_tests: Also write a pytest smoke test next to the module
            soap_version: Force the SOAP version recorded on clients, or AUTO to take it from the bindings
            verbose: Whether to print debug information (default: False)
        """
        self.wsdl_path = wsdl_path
        self.out_dir = out_dir
        self.module_name = module_name or DEFAULT_MODULE_NAME
        self.client_name = client_name
        self.generate_tests = generate_tests
        self.soap_version = soap_version
        self.verbose = verbose
        self.warnings: List[str] = []

    def debug_print(self, message: str) -> None:
        if self.verbose:
            print(f"[DEBUG] {message}")

    def validate(self) -> None:
        if not self.wsdl_path:
            raise MissingConfigurationError("wsdl_path")
        if not self.out_dir:
            raise MissingConfigurationError("out_dir")

    def read_wsdl(self) -> bytes:
        if not self.wsdl_path:
            raise MissingConfigurationError("wsdl_path")
        try:
            with open(self.wsdl_path, 'rb') as f:
                return f.read()
        except OSError as e:
            raise FileReadError(self.wsdl_path, e) from e

    def parse(self) -> ServiceModel:
        """
        Parse the WSDL file. Warnings are stored in self.warnings.
        """
        content = self.read_wsdl()
        self.debug_print(f"Parsing {self.wsdl_path} ({len(content)} bytes)")
        parser = WsdlParser(content, self.verbose)
        try:
            model = parser.parse()
        except CodegenError as e:
            raise e.with_context(f"Failed to parse '{self.wsdl_path}'") from e
        self.warnings = list(parser.warnings)
        return model

    def generation_options(self) -> GenerationOptions:
        soap_version = None if self.soap_version == SoapVersion.AUTO else self.soap_version.value
        return GenerationOptions(self.module_name, self.client_name, soap_version)

    def _write(self, path: str, code: str) -> None:
        try:
            with open(path, 'w', encoding='utf-8') as f:
                f.write(code)
        except OSError as e:
            raise FileWriteError(path, e) from e

    def generate(self) -> GeneratedCode:
        """
        Parse the WSDL and write the client module (and optionally its smoke test).

        Returns:
            GeneratedCode describing the written files
        """
        self.validate()
        model = self.parse()
        options = self.generation_options()
        module = generate_client_code(model, options)
        warnings = self.warnings + module.warnings

        try:
            os.makedirs(self.out_dir, exist_ok=True)
        except OSError as e:
            raise FileWriteError(self.out_dir, e) from e

        output_file = os.path.join(self.out_dir, f"{options.module_name}.py")
        self._write(output_file, module.code)
        self.debug_print(f"Wrote {output_file}")

        test_file = None
        if self.generate_tests:
            test_file = os.path.join(self.out_dir, f"test_{options.module_name}.py")
            self._write(test_file, generate_smoke_test_code(model, options))
            self.debug_print(f"Wrote {test_file}")

        self.warnings = warnings
        return GeneratedCode(output_file, module.code, warnings, test_file)


def _env_flag(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _print_warnings(warnings: List[str]) -> None:
    if not warnings:
        return
    print(f"Warnings ({len(warnings)}):")
    for warning in warnings:
        print(f"  - {warning}")


def parse_arguments(argv: Optional[List[str]] = None):
    """
    Parse command line arguments.

    Returns:
        argparse.Namespace: Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="Generate typed Python SOAP clients from WSDL documents",
        formatter_class=argparse.RawTextHelpFormatter
    )
    subparsers = parser.add_subparsers(dest='command', required=True)

    parse_cmd = subparsers.add_parser('parse', help='Parse and validate a WSDL file')
    parse_cmd.add_argument('wsdl', help='Path to the WSDL file')
    parse_cmd.add_argument('--verbose', '-v', action='store_true', help='Print the parsed structure and debug output')
    parse_cmd.add_argument('--dump', metavar='FILE', help='Write the parsed structure to FILE')

    generate_cmd = subparsers.add_parser('generate', help='Generate a Python client module')
    generate_cmd.add_argument('wsdl', help='Path to the WSDL file')
    generate_cmd.add_argument('--output', '-o', default='.', help='Directory where the module is written (default: .)')
    generate_cmd.add_argument('--client-name', '-c', help='Class name of the first client (default: service name)')
    generate_cmd.add_argument('--soap-version', '-s', default='auto', help='SOAP version: 1.1, 1.2 or auto (default: auto)')
    generate_cmd.add_argument('--module-name', '-m', help=f'Module name without extension (default: {DEFAULT_MODULE_NAME})')
    generate_cmd.add_argument('--generate-tests', action='store_true', help='Also write a pytest smoke test module')
    generate_cmd.add_argument('--verbose', '-v', action='store_true', help='Enable verbose output for debugging')

    info_cmd = subparsers.add_parser('info', help='Print a summary of a WSDL file')
    info_cmd.add_argument('wsdl', help='Path to the WSDL file')
    info_cmd.add_argument('--json', action='store_true', help='Print the whole parsed model as JSON')

    return parser.parse_args(argv)


def run_parse(args) -> None:
    verbose = _env_flag('WW_VERBOSE', args.verbose)
    wrangler = WsdlClientGenerator(args.wsdl, None, verbose=verbose)
    model = wrangler.parse()
    print(f"WSDL parsed successfully: {args.wsdl}")
    if verbose:
        print(model_details(model))
    if args.dump:
        debug_print_model(model, file_path=args.dump, out_dir='.')
    _print_warnings(wrangler.warnings)


def run_generate(args) -> None:
    # Override with environment variables if set
    output_dir = os.environ.get('WW_OUTPUT_DIR', args.output)
    client_name = os.environ.get('WW_CLIENT_NAME', args.client_name)
    module_name = os.environ.get('WW_MODULE_NAME', args.module_name)
    soap_version = SoapVersion.parse(os.environ.get('WW_SOAP_VERSION', args.soap_version))
    verbose = _env_flag('WW_VERBOSE', args.verbose)

    wrangler = WsdlClientGenerator(
        args.wsdl,
        output_dir,
        module_name=module_name,
        client_name=client_name,
        generate_tests=args.generate_tests,
        soap_version=soap_version,
        verbose=verbose,
    )
    result = wrangler.generate()
    print(f"Generated {result.output_file}")
    if result.test_file:
        print(f"Generated {result.test_file}")
    _print_warnings(result.warnings)


def run_info(args) -> None:
    wrangler = WsdlClientGenerator(args.wsdl, None)
    model = wrangler.parse()
    if args.json:
        print(model_to_json(model))
    else:
        print(model_summary(model))


def main(argv: Optional[List[str]] = None):
    """
    Main entry point of the script.
    """
    args = parse_arguments(argv)
    commands = {
        'parse': run_parse,
        'generate': run_generate,
        'info': run_info,
    }
    try:
        commands[args.command](args)
    except (CodegenError, ValueError) as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
