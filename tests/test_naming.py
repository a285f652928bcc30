import pytest

from application.codegen import naming


@pytest.mark.parametrize(
    "name, expected",
    [
        ("SayHello", "say_hello"),
        ("sayHello", "say_hello"),
        ("HTTPRequest", "http_request"),
        ("GetV2Items", "get_v2_items"),
        ("already_snake", "already_snake"),
        ("Chat", "chat"),
    ],
)
def test_to_snake_case(name, expected):
    assert naming.to_snake_case(name) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("say_hello", "SayHello"),
        ("SayHello", "SayHello"),
        ("HTTPRequest", "HttpRequest"),
        ("greeter", "Greeter"),
    ],
)
def test_to_upper_camel_case(name, expected):
    assert naming.to_upper_camel_case(name) == expected


def test_method_ident_escapes_python_keywords():
    assert naming.method_ident("Import") == "import_"
    assert naming.method_ident("Async") == "async_"
    assert naming.method_ident("Lambda") == "lambda_"


def test_method_ident_avoids_client_members():
    assert naming.method_ident("WithCallopt") == "with_callopt_"
    assert naming.method_ident("Client") == "client_"
    assert naming.method_ident("SetClient") == "set_client_"


def test_variant_ident_escapes_singleton_keywords():
    assert naming.variant_ident("none") == "None_"
    assert naming.variant_ident("true") == "True_"
    assert naming.variant_ident("SayHello") == "SayHello"


def test_arg_ident_defaults_to_req():
    assert naming.arg_ident("") == "req"
    assert naming.arg_ident("request") == "request"
    assert naming.arg_ident("from") == "from_"


def test_arg_ident_avoids_implicit_parameters():
    assert naming.arg_ident("self") == "self_"
    assert naming.arg_ident("cls") == "cls_"
    assert naming.arg_ident("Self") == "self_"
