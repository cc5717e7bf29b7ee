from pytest_archon import archrule


def test_primitives_isolation() -> None:
    """
    Primitives layer is the lowest level.
    It must not import from domain, messaging, ports, or the service layer.
    """
    (
        archrule("primitives_isolation")
        .match("order_relay.primitives*")
        .should_not_import("order_relay.domain*")
        .should_not_import("order_relay.messaging*")
        .should_not_import("order_relay.ports*")
        .should_not_import("order_relay.service*")
        .check("order_relay")
    )


def test_domain_isolation() -> None:
    """
    Domain models are plain data.
    They must not import transports, adapters, or the service layer.
    """
    (
        archrule("domain_isolation")
        .match("order_relay.domain*")
        .should_not_import("order_relay.messaging*")
        .should_not_import("order_relay.adapters*")
        .should_not_import("order_relay.service*")
        .should_not_import("order_relay.api*")
        .check("order_relay")
    )


def test_ports_layering() -> None:
    """
    Ports (interfaces) should not depend on Adapters (implementations).
    """
    (
        archrule("ports_layering")
        .match("order_relay.ports*")
        .should_not_import("order_relay.adapters*")
        .should_not_import("order_relay.messaging.rabbitmq*")
        .should_not_import("order_relay.messaging.kafka*")
        .should_not_import("order_relay.messaging.sqs*")
        .should_not_import("order_relay.messaging.redis*")
        .check("order_relay")
    )


def test_service_is_transport_agnostic() -> None:
    """
    The order processor must never know which broker it talks to.
    """
    (
        archrule("service_transport_agnostic")
        .match("order_relay.service*")
        .match("order_relay.scheduling*")
        .match("order_relay.listener")
        .should_not_import("order_relay.messaging.rabbitmq*")
        .should_not_import("order_relay.messaging.kafka*")
        .should_not_import("order_relay.messaging.sqs*")
        .should_not_import("order_relay.messaging.redis*")
        .should_not_import("order_relay.bootstrap")
        .should_not_import("order_relay.api*")
        .check("order_relay")
    )


def test_messaging_no_service_or_api() -> None:
    """Transport bindings must not import the service layer or the HTTP surface."""
    (
        archrule("messaging_independence")
        .match("order_relay.messaging*")
        .should_not_import("order_relay.service*")
        .should_not_import("order_relay.listener")
        .should_not_import("order_relay.bootstrap")
        .should_not_import("order_relay.api*")
        .check("order_relay")
    )
