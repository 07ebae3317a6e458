"""
Tests for the Python client generator. Generated modules are written to disk and imported,
so these also check that the emitted code is valid Python.
"""
import dataclasses
import enum
import typing

import pytest

from namespace_resolver import QName
from schema_model import ComplexType, SchemaModel, Sequence, SequenceElement
from schema_parser import parse_schema
from service_model import (
    Binding,
    BindingOperation,
    Message,
    MessagePart,
    PortType,
    PortTypeOperation,
    ServiceModel,
)
from wsdl_parser import parse_wsdl
from generators.python_client_generator import (
    GenerationOptions,
    generate_client_code,
    generate_smoke_test_code,
)


def test_calculator_end_to_end(calculator_wsdl, load_generated, recording_transport):
    model, _ = parse_wsdl(calculator_wsdl)
    result = generate_client_code(model, GenerationOptions())
    assert result.warnings == []
    module = load_generated(result.code)

    assert module.TARGET_NAMESPACE == "http://tempuri.org/"
    assert module.QUALIFY_CHILDREN is True
    client_cls = module.Calculator
    assert client_cls.ENDPOINT_URL == "http://www.dneonline.com/calculator.asmx"
    assert client_cls.SOAP_VERSION == "1.1"
    for name in ("add", "subtract", "multiply", "divide"):
        assert callable(getattr(client_cls, name))

    transport = recording_transport(response=module.AddResponse(add_result=5))
    client = client_cls(transport)
    response = client.add(module.Add(int_a=2, int_b=3))
    assert response == module.AddResponse(add_result=5)
    call = transport.calls[0]
    assert call['operation'] == "Add"
    assert call['soap_action'] == "http://tempuri.org/Add"
    assert call['namespace'] == "http://tempuri.org/"
    assert call['qualify_children'] is True
    assert call['request'] == module.Add(int_a=2, int_b=3)
    assert call['response_type'] is module.AddResponse


def test_calculator_field_wire_names(calculator_wsdl, load_generated):
    model, _ = parse_wsdl(calculator_wsdl)
    module = load_generated(generate_client_code(model).code)
    fields = {f.name: f for f in dataclasses.fields(module.Add)}
    assert list(fields) == ["int_a", "int_b"]
    assert fields["int_a"].metadata["wire_name"] == "intA"
    assert fields["int_a"].kw_only


def test_calculator_method_docstring(calculator_wsdl, load_generated):
    model, _ = parse_wsdl(calculator_wsdl)
    module = load_generated(generate_client_code(model).code)
    doc = module.Calculator.add.__doc__
    assert "Call the Add operation." in doc
    assert "Adds two integers." in doc
    assert module.Calculator.subtract.__doc__ == "Call the Subtract operation."


def test_soap_version_option_overrides_bindings(calculator_wsdl, load_generated):
    model, _ = parse_wsdl(calculator_wsdl)
    options = GenerationOptions(client_name="CalculatorClient", soap_version="1.2")
    module = load_generated(generate_client_code(model, options).code)
    assert module.CalculatorClient.SOAP_VERSION == "1.2"
    assert not hasattr(module, "Calculator")


def test_countries_records_enums_and_aliases(countries_wsdl, load_generated):
    model, _ = parse_wsdl(countries_wsdl)
    result = generate_client_code(model)
    assert result.warnings == []
    module = load_generated(result.code)

    assert issubclass(module.Continent, enum.Enum)
    assert issubclass(module.Continent, str)
    assert [m.name for m in module.Continent] == ["Africa", "NorthAmerica", "Europe"]
    assert module.Continent.NorthAmerica.value == "North America"
    assert module.Continent("Europe") is module.Continent.Europe

    info_fields = {f.name: f for f in dataclasses.fields(module.TCountryInfo)}
    assert list(info_fields) == ["s_iso_code", "s_name", "continent", "population", "area", "capital", "languages"]
    assert info_fields["s_iso_code"].metadata["wire_name"] == "sISOCode"
    assert info_fields["area"].default is None
    assert info_fields["capital"].default is None
    assert info_fields["population"].default is dataclasses.MISSING

    assert module.Coordinate is module.TCoordinate
    assert "class IsoCode" not in result.code
    assert "s_iso_code: str = " in result.code
    assert "t_language: Optional[List[TLanguage]] = " in result.code
    assert "list_of_continents_result: Optional[List[Continent]] = " in result.code

    client = module.CountryInfoService(transport=None)
    assert callable(client.country_info)
    assert callable(client.list_of_continents)


def test_empty_record_has_default_constructor(countries_wsdl, load_generated):
    model, _ = parse_wsdl(countries_wsdl)
    module = load_generated(generate_client_code(model).code)
    empty = module.ListOfContinents.default()
    assert empty == module.ListOfContinents()
    assert dataclasses.fields(empty) == ()


def test_float_record_has_value_equality_and_is_unhashable(countries_wsdl, load_generated):
    model, _ = parse_wsdl(countries_wsdl)
    module = load_generated(generate_client_code(model).code)
    a = module.TCoordinate(latitude=1.5, longitude=-0.25)
    b = module.TCoordinate(latitude=1.5, longitude=-0.25)
    assert a == b
    assert a != module.TCoordinate(latitude=1.5, longitude=0.0)
    with pytest.raises(TypeError):
        hash(a)


def _model_with_schema(schema, operations=(), messages=(), bindings=()):
    port_types = (PortType("P", tuple(operations)),) if operations else ()
    return ServiceModel(
        name="Test",
        target_namespace="urn:test",
        messages=tuple(messages),
        port_types=port_types,
        bindings=tuple(bindings),
        schema=schema,
    )


def test_extension_base_becomes_python_base_class(load_generated):
    schema = SchemaModel(target_namespace="urn:test")
    schema.complex_types["Derived"] = ComplexType(
        "Derived", Sequence((SequenceElement("extra", QName("xs:string")),)), QName("tns:Base")
    )
    schema.complex_types["Base"] = ComplexType("Base", Sequence((SequenceElement("id", QName("xs:int")),)))
    module = load_generated(generate_client_code(_model_with_schema(schema)).code)
    assert issubclass(module.Derived, module.Base)
    value = module.Derived(id_=1, extra="x")
    assert value.id_ == 1 and value.extra == "x"
    base_field = dataclasses.fields(module.Base)[0]
    assert base_field.name == "id_"
    assert base_field.metadata["wire_name"] == "id"


def test_reserved_and_colliding_names(load_generated):
    schema = SchemaModel(target_namespace="urn:test")
    schema.complex_types["class"] = ComplexType("class", Sequence((
        SequenceElement("from", QName("xs:string")),
        SequenceElement("userName", QName("xs:string")),
        SequenceElement("user_name", QName("xs:string")),
    )))
    schema.complex_types["Class"] = ComplexType("Class", Sequence(()))
    result = generate_client_code(_model_with_schema(schema))
    module = load_generated(result.code)
    assert "Wire name: class." in module.Class.__doc__
    assert module.Class2.default() == module.Class2()
    names = [f.name for f in dataclasses.fields(module.Class)]
    assert names == ["from_", "user_name", "user_name_2"]
    wire = [f.metadata["wire_name"] for f in dataclasses.fields(module.Class)]
    assert wire == ["from", "userName", "user_name"]


def test_unresolved_references_degrade_to_none_and_any(load_generated):
    schema = SchemaModel(target_namespace="urn:test")
    schema.complex_types["Holder"] = ComplexType(
        "Holder", Sequence((SequenceElement("thing", QName("ext:Imported"), min_occurs=0),))
    )
    operations = [
        PortTypeOperation("Lost", input=QName("tns:Missing"), output=None),
        PortTypeOperation("Typed", input=QName("tns:TypedIn"), output=QName("tns:TypedIn")),
    ]
    messages = [Message("TypedIn", (MessagePart("value", type=QName("xs:int")),))]
    result = generate_client_code(_model_with_schema(schema, operations, messages))
    module = load_generated(result.code)

    assert "thing: Optional[Any] = None" in result.code
    assert any("ext:Imported" in w for w in result.warnings)
    assert any("tns:Missing" in w for w in result.warnings)
    assert "def lost(self, request: None = None) -> None:" in result.code
    assert "def typed(self, request: int) -> int:" in result.code
    client = module.Test(transport=None)
    assert callable(client.lost)


def test_no_services_uses_document_name_and_all_operations(recording_transport, load_generated):
    operations = [PortTypeOperation("Ping"), PortTypeOperation("get-status")]
    model = _model_with_schema(None, operations)
    module = load_generated(generate_client_code(model).code)
    transport = recording_transport()
    client = module.Test(transport)
    assert client.ping() is None
    client.get_status()
    assert [c['operation'] for c in transport.calls] == ["Ping", "get-status"]
    assert transport.calls[0]['soap_action'] is None
    assert module.Test.ENDPOINT_URL is None
    assert module.Test.SOAP_VERSION == "1.1"
    assert module.TARGET_NAMESPACE == "urn:test"
    assert module.QUALIFY_CHILDREN is False


def test_no_services_and_no_name_uses_service_client():
    model = ServiceModel(port_types=(PortType("P", (PortTypeOperation("Ping"),)),))
    code = generate_client_code(model).code
    assert "class ServiceClient:" in code


def test_ambiguous_soap_action_warns_and_uses_first():
    operations = [PortTypeOperation("Echo")]
    bindings = [
        Binding("B1", QName("tns:P"), "http", "1.1", (BindingOperation("Echo", "urn:one"),)),
        Binding("B2", QName("tns:P"), "http", "1.2", (BindingOperation("Echo", "urn:two"),)),
    ]
    result = generate_client_code(_model_with_schema(None, operations, bindings=bindings))
    assert '"urn:one",' in result.code
    assert '"urn:two"' not in result.code
    assert any("different SOAP actions" in w for w in result.warnings)


def test_smoke_test_module(calculator_wsdl):
    model, _ = parse_wsdl(calculator_wsdl)
    code = generate_smoke_test_code(model, GenerationOptions(module_name="calc"))
    assert "import calc" in code
    assert "def test_calculator_exposes_operations():" in code
    assert '"add", "subtract", "multiply", "divide"' in code
    compile(code, "test_calc.py", "exec")


@pytest.mark.parametrize("operation", ["Add", "Subtract", "Multiply", "Divide"])
def test_calculator_operations_are_typed_with_plain_ints(calculator_wsdl, load_generated, operation):
    model, _ = parse_wsdl(calculator_wsdl)
    result = generate_client_code(model)
    module = load_generated(result.code)
    request_cls = getattr(module, operation)
    response_cls = getattr(module, f"{operation}Response")

    method = getattr(module.Calculator, operation.lower())
    hints = typing.get_type_hints(method)
    assert hints["request"] is request_cls
    assert hints["return"] is response_cls

    assert typing.get_type_hints(request_cls) == {"int_a": int, "int_b": int}
    result_field = f"{operation.lower()}_result"
    assert typing.get_type_hints(response_cls) == {result_field: int}
    assert f"    {result_field}: int = " in result.code
    records = result.code[result.code.index("@dataclass"):result.code.index("class Calculator")]
    assert "Optional[" not in records


def _schema_model(body):
    schema, _ = parse_schema(
        '<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema" xmlns:tns="urn:test" '
        f'targetNamespace="urn:test">{body}</xs:schema>'
    )
    return schema


def test_message_elements_with_simple_types(load_generated):
    schema = _schema_model("""
<xs:element name="Status">
  <xs:simpleType>
    <xs:restriction base="xs:string"><xs:enumeration value="on"/><xs:enumeration value="off"/></xs:restriction>
  </xs:simpleType>
</xs:element>
<xs:element name="Count" type="xs:int"/>
""")
    operations = [PortTypeOperation("SetStatus", input=QName("tns:StatusIn"), output=QName("tns:CountOut"))]
    messages = [
        Message("StatusIn", (MessagePart("parameters", element=QName("tns:Status")),)),
        Message("CountOut", (MessagePart("parameters", element=QName("tns:Count")),)),
    ]
    result = generate_client_code(_model_with_schema(schema, operations, messages))
    assert result.warnings == []
    assert "def set_status(self, request: Status) -> Count:" in result.code
    module = load_generated(result.code)
    assert module.Count is int
    hints = typing.get_type_hints(module.Test.set_status)
    assert hints["request"] is module.Status
    assert issubclass(module.Status, enum.Enum)


def test_element_refs_use_the_referenced_element_type(load_generated):
    schema = _schema_model("""
<xs:complexType name="ItemType"><xs:sequence><xs:element name="sku" type="xs:string"/></xs:sequence></xs:complexType>
<xs:complexType name="Basket">
  <xs:sequence><xs:element ref="tns:Item" maxOccurs="unbounded"/></xs:sequence>
</xs:complexType>
<xs:element name="Item" type="tns:ItemType"/>
""")
    result = generate_client_code(_model_with_schema(schema))
    assert result.warnings == []
    assert 'item: List[ItemType] = field(metadata={"wire_name": "Item"})' in result.code
    module = load_generated(result.code)
    basket = module.Basket(item=[module.ItemType(sku="a")])
    assert basket.item[0].sku == "a"


def test_option_names_are_made_valid_identifiers(calculator_wsdl, load_generated):
    model, _ = parse_wsdl(calculator_wsdl)
    options = GenerationOptions(module_name="calc-client", client_name="calc client")
    assert options.module_name == "calc_client"
    assert options.client_name == "CalcClient"
    module = load_generated(generate_client_code(model, options).code, module_name=options.module_name)
    assert callable(module.CalcClient(transport=None).add)
    smoke = generate_smoke_test_code(model, options)
    assert "import calc_client" in smoke
