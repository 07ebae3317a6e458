"""
Tests for the command line front end and the WsdlClientGenerator driver.
"""
import json
import os

import pytest

from codegen_errors import ContextError, FileReadError, MissingConfigurationError, XmlParseError
from wsdl_wrangler import SoapVersion, WsdlClientGenerator, main, parse_arguments


@pytest.mark.parametrize("text,expected", [
    ("1.1", SoapVersion.SOAP11),
    ("soap12", SoapVersion.SOAP12),
    (" 12 ", SoapVersion.SOAP12),
    ("AUTO", SoapVersion.AUTO),
])
def test_soap_version_parse(text, expected):
    assert SoapVersion.parse(text) == expected


def test_soap_version_parse_rejects_unknown():
    with pytest.raises(ValueError):
        SoapVersion.parse("2.0")


def test_validate_requires_paths(temp_dir):
    with pytest.raises(MissingConfigurationError) as excinfo:
        WsdlClientGenerator("", temp_dir).validate()
    assert str(excinfo.value) == "Missing required configuration field: wsdl_path"
    with pytest.raises(MissingConfigurationError):
        WsdlClientGenerator("service.wsdl", "").validate()


def test_missing_wsdl_file(temp_dir):
    missing = os.path.join(temp_dir, "missing.wsdl")
    with pytest.raises(FileReadError) as excinfo:
        WsdlClientGenerator(missing, temp_dir).parse()
    assert missing in str(excinfo.value)


def test_generate_writes_module_and_smoke_test(calculator_wsdl_path, temp_dir):
    out_dir = os.path.join(temp_dir, "nested", "out")
    wrangler = WsdlClientGenerator(calculator_wsdl_path, out_dir, generate_tests=True)
    result = wrangler.generate()
    assert result.output_file == os.path.join(out_dir, "soap_client.py")
    assert result.test_file == os.path.join(out_dir, "test_soap_client.py")
    assert result.warnings == []
    with open(result.output_file, encoding='utf-8') as f:
        assert f.read() == result.code
    with open(result.test_file, encoding='utf-8') as f:
        assert "import soap_client" in f.read()


def test_generate_applies_options(calculator_wsdl_path, temp_dir):
    wrangler = WsdlClientGenerator(
        calculator_wsdl_path, temp_dir, module_name="calc", client_name="CalcClient",
        soap_version=SoapVersion.SOAP12,
    )
    result = wrangler.generate()
    assert result.output_file.endswith("calc.py")
    assert result.test_file is None
    assert "class CalcClient:" in result.code
    assert 'SOAP_VERSION = "1.2"' in result.code


def test_parse_arguments_defaults():
    args = parse_arguments(["generate", "service.wsdl"])
    assert args.command == "generate"
    assert args.output == "."
    assert args.soap_version == "auto"
    assert args.client_name is None
    assert not args.generate_tests


def test_cli_parse(calculator_wsdl_path, capsys):
    main(["parse", calculator_wsdl_path])
    out = capsys.readouterr().out
    assert f"WSDL parsed successfully: {calculator_wsdl_path}" in out
    assert "ServiceModel" not in out


def test_cli_parse_verbose_prints_structure(calculator_wsdl_path, capsys):
    main(["parse", calculator_wsdl_path, "--verbose"])
    out = capsys.readouterr().out
    assert "ServiceModel" in out
    assert "Operation: Add" in out


def test_cli_generate(calculator_wsdl_path, temp_dir, capsys):
    main(["generate", calculator_wsdl_path, "-o", temp_dir, "-m", "calculator_client", "--generate-tests"])
    out = capsys.readouterr().out
    assert f"Generated {os.path.join(temp_dir, 'calculator_client.py')}" in out
    assert os.path.exists(os.path.join(temp_dir, "test_calculator_client.py"))


def test_cli_generate_environment_overrides(calculator_wsdl_path, temp_dir, monkeypatch, capsys):
    env_dir = os.path.join(temp_dir, "from_env")
    monkeypatch.setenv("WW_OUTPUT_DIR", env_dir)
    monkeypatch.setenv("WW_CLIENT_NAME", "EnvClient")
    monkeypatch.setenv("WW_SOAP_VERSION", "1.2")
    main(["generate", calculator_wsdl_path, "-o", temp_dir])
    capsys.readouterr()
    with open(os.path.join(env_dir, "soap_client.py"), encoding='utf-8') as f:
        code = f.read()
    assert "class EnvClient:" in code
    assert 'SOAP_VERSION = "1.2"' in code


def test_cli_info(calculator_wsdl_path, capsys):
    main(["info", calculator_wsdl_path])
    out = capsys.readouterr().out
    assert "Service: Calculator" in out
    assert "Operations: 4" in out
    assert "Bindings: 2 (SOAP 1.1, 1.2)" in out
    assert "Endpoint: http://www.dneonline.com/calculator.asmx" in out


def test_cli_errors_exit_with_status_one(temp_dir, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["info", os.path.join(temp_dir, "missing.wsdl")])
    assert excinfo.value.code == 1
    assert capsys.readouterr().out.startswith("Error: Failed to read file")


def test_cli_rejects_bad_soap_version(calculator_wsdl_path, temp_dir, capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["generate", calculator_wsdl_path, "-o", temp_dir, "-s", "3"])
    assert excinfo.value.code == 1
    assert "Invalid SOAP version" in capsys.readouterr().out


def test_parse_errors_name_the_file(temp_dir):
    path = os.path.join(temp_dir, "broken.wsdl")
    with open(path, 'w', encoding='utf-8') as f:
        f.write('<wsdl:definitions xmlns:wsdl="http://schemas.xmlsoap.org/wsdl/"><a></b></wsdl:definitions>')
    with pytest.raises(ContextError) as excinfo:
        WsdlClientGenerator(path, temp_dir).parse()
    assert str(excinfo.value).startswith(f"Failed to parse '{path}': ")
    assert isinstance(excinfo.value.source, XmlParseError)
    assert excinfo.value.__cause__ is excinfo.value.source


def test_generate_sanitizes_module_and_client_names(calculator_wsdl_path, temp_dir, load_generated):
    wrangler = WsdlClientGenerator(
        calculator_wsdl_path, temp_dir, module_name="my-client", client_name="my client", generate_tests=True,
    )
    result = wrangler.generate()
    assert result.output_file == os.path.join(temp_dir, "my_client.py")
    assert result.test_file == os.path.join(temp_dir, "test_my_client.py")
    module = load_generated(result.code, module_name="my_client")
    assert callable(module.MyClient(transport=None).add)
    with open(result.test_file, encoding='utf-8') as f:
        assert "import my_client" in f.read()


def test_cli_parse_dump(calculator_wsdl_path, temp_dir, capsys):
    dump = os.path.join(temp_dir, "model.txt")
    main(["parse", calculator_wsdl_path, "--dump", dump])
    out = capsys.readouterr().out
    assert f"Model details written to {dump}" in out
    with open(dump, encoding='utf-8') as f:
        details = f.read()
    assert details.startswith("ServiceModel")
    assert "Operation: Add" in details


def test_cli_info_json(calculator_wsdl_path, capsys):
    main(["info", calculator_wsdl_path, "--json"])
    data = json.loads(capsys.readouterr().out)
    assert data['target_namespace'] == "http://tempuri.org/"
    assert "Add" in data['schema']['complex_types']
