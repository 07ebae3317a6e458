import sys
import os
import importlib.util
from tempfile import TemporaryDirectory
import pytest
# Ensure the project root is on sys.path for all tests
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

WSDL_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'wsdl')


def read_fixture(name):
    with open(os.path.join(WSDL_DIR, name), 'rb') as f:
        return f.read()


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test outputs."""
    with TemporaryDirectory() as dir_path:
        yield dir_path


@pytest.fixture
def calculator_wsdl_path():
    return os.path.join(WSDL_DIR, 'calculator.wsdl')


@pytest.fixture
def calculator_wsdl():
    return read_fixture('calculator.wsdl')


@pytest.fixture
def countries_wsdl():
    return read_fixture('countries.wsdl')


@pytest.fixture
def load_generated(temp_dir):
    """Write generated code to temp_dir and import it as a real module."""
    loaded = []

    def _load(code, module_name="soap_client"):
        path = os.path.join(temp_dir, f"{module_name}.py")
        with open(path, 'w', encoding='utf-8') as f:
            f.write(code)
        spec = importlib.util.spec_from_file_location(module_name, path)
        module = importlib.util.module_from_spec(spec)
        sys.modules[module_name] = module
        spec.loader.exec_module(module)
        loaded.append(module_name)
        return module

    yield _load
    for name in loaded:
        sys.modules.pop(name, None)


class RecordingTransport:
    """SoapTransport double that records every call and returns a canned response."""

    def __init__(self, response=None):
        self.response = response
        self.calls = []

    def call_with_action(self, operation, soap_action, namespace, qualify_children, request, response_type=None):
        self.calls.append({
            'operation': operation,
            'soap_action': soap_action,
            'namespace': namespace,
            'qualify_children': qualify_children,
            'request': request,
            'response_type': response_type,
        })
        return self.response


@pytest.fixture
def recording_transport():
    return RecordingTransport
