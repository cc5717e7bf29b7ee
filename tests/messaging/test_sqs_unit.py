"""Unit tests for the SQS binding with mocked aiobotocore (no real AWS)."""

from __future__ import annotations

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from order_relay.messaging.envelope import EnvelopeCodec
from order_relay.messaging.sqs.connection import SQSConnectionManager
from order_relay.messaging.sqs.consumer import SQSConsumer, to_inbound
from order_relay.messaging.sqs.publisher import SQSPublisher, to_message_attributes
from order_relay.primitives.exceptions import TransportConnectionError, TransportFailure

QUEUE_URL = "https://sqs.us-east-1.amazonaws.com/123/new-orders"


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.send_message = AsyncMock()
    client.receive_message = AsyncMock()
    client.delete_message = AsyncMock()
    client.get_queue_url = AsyncMock(return_value={"QueueUrl": QUEUE_URL})
    client.create_queue = AsyncMock(return_value={"QueueUrl": QUEUE_URL + "-new"})
    client.list_queues = AsyncMock(return_value={"QueueUrls": []})
    return client


@pytest.fixture
def mock_connection(mock_client: MagicMock) -> MagicMock:
    conn = MagicMock()
    conn.get_client = AsyncMock(return_value=mock_client)
    conn.get_queue_url = AsyncMock(return_value=QUEUE_URL)
    conn.health_check = AsyncMock(return_value=True)
    return conn


@pytest.fixture
def mock_session(mock_client: MagicMock) -> MagicMock:
    session = MagicMock()
    mock_cm = MagicMock()
    mock_cm.__aenter__ = AsyncMock(return_value=mock_client)
    mock_cm.__aexit__ = AsyncMock(return_value=None)
    session.create_client = MagicMock(return_value=mock_cm)
    return session


@pytest.mark.asyncio
async def test_publish_wrapped_with_attribute(
    mock_connection: MagicMock, mock_client: MagicMock
) -> None:
    await SQSPublisher(mock_connection).publish("new-orders", '{"id": 1}', "c1")
    mock_connection.get_queue_url.assert_awaited_once_with("new-orders")
    kwargs = mock_client.send_message.call_args.kwargs
    assert kwargs["QueueUrl"] == QUEUE_URL
    assert json.loads(kwargs["MessageBody"]) == {
        "orderCorrelationId": "c1",
        "payload": {"id": 1},
    }
    assert kwargs["MessageAttributes"] == {
        "orderCorrelationId": {"DataType": "String", "StringValue": "c1"}
    }
    assert "MessageGroupId" not in kwargs


@pytest.mark.asyncio
async def test_publish_fifo_queue(
    mock_connection: MagicMock, mock_client: MagicMock
) -> None:
    mock_connection.get_queue_url.return_value = QUEUE_URL + ".fifo"
    await SQSPublisher(mock_connection, codec=EnvelopeCodec()).publish("q", "{}", "c1")
    kwargs = mock_client.send_message.call_args.kwargs
    assert kwargs["MessageBody"] == "{}"
    assert kwargs["MessageGroupId"] == "orders"
    assert kwargs["MessageDeduplicationId"] == "c1"


def test_blank_attributes_are_dropped() -> None:
    assert to_message_attributes({"orderCorrelationId": ""}) == {}


@pytest.mark.asyncio
async def test_publish_error_is_transport_failure(
    mock_connection: MagicMock, mock_client: MagicMock
) -> None:
    mock_client.send_message.side_effect = RuntimeError("throttled")
    with pytest.raises(TransportFailure, match="throttled"):
        await SQSPublisher(mock_connection).publish("q", "{}", "c")


def test_to_inbound_maps_attributes() -> None:
    inbound = to_inbound(
        "new-orders",
        {
            "Body": '{"id": 1}',
            "ReceiptHandle": "r",
            "MessageAttributes": {
                "orderCorrelationId": {"DataType": "String", "StringValue": "abc"},
                "blob": {"DataType": "Binary", "BinaryValue": b"x"},
            },
        },
    )
    assert inbound.body == '{"id": 1}'
    assert inbound.headers == {"orderCorrelationId": "abc"}


@pytest.mark.asyncio
async def test_poll_once_handles_and_deletes(
    mock_connection: MagicMock, mock_client: MagicMock
) -> None:
    mock_client.receive_message.return_value = {
        "Messages": [
            {"Body": "{}", "ReceiptHandle": "r1"},
            {"Body": "{}", "ReceiptHandle": "r2"},
        ]
    }
    handler = AsyncMock(side_effect=[None, ValueError("bad")])
    consumer = SQSConsumer(mock_connection, wait_time_seconds=1)
    await consumer.subscribe("new-orders", handler)

    assert await consumer.poll_once() == 2
    receive = mock_client.receive_message.call_args.kwargs
    assert receive["MessageAttributeNames"] == ["All"]
    assert receive["WaitTimeSeconds"] == 1
    deleted = [c.kwargs["ReceiptHandle"] for c in mock_client.delete_message.call_args_list]
    assert deleted == ["r1", "r2"]


@pytest.mark.asyncio
async def test_connection_caches_client_and_queue_url(
    mock_session: MagicMock, mock_client: MagicMock
) -> None:
    conn = SQSConnectionManager(
        "eu-west-1", session=mock_session, endpoint_url="http://localhost:4566"
    )
    assert await conn.get_queue_url("new-orders") == QUEUE_URL
    assert await conn.get_queue_url("new-orders") == QUEUE_URL
    mock_client.get_queue_url.assert_awaited_once_with(QueueName="new-orders")
    mock_session.create_client.assert_called_once_with(
        "sqs", region_name="eu-west-1", endpoint_url="http://localhost:4566"
    )
    await conn.close()
    mock_session.create_client.return_value.__aexit__.assert_awaited_once()


@pytest.mark.asyncio
async def test_missing_queue_is_created(
    mock_session: MagicMock, mock_client: MagicMock
) -> None:
    error = Exception("missing")
    error.response = {"Error": {"Code": "AWS.SimpleQueueService.NonExistentQueue"}}  # type: ignore[attr-defined]
    mock_client.get_queue_url.side_effect = error
    conn = SQSConnectionManager(session=mock_session)
    assert await conn.get_queue_url("fresh") == QUEUE_URL + "-new"
    mock_client.create_queue.assert_awaited_once_with(QueueName="fresh")


@pytest.mark.asyncio
async def test_other_queue_errors_are_connection_errors(
    mock_session: MagicMock, mock_client: MagicMock
) -> None:
    mock_client.get_queue_url.side_effect = Exception("denied")
    conn = SQSConnectionManager(session=mock_session)
    with pytest.raises(TransportConnectionError):
        await conn.get_queue_url("q")


@pytest.mark.asyncio
async def test_health_check(mock_session: MagicMock, mock_client: MagicMock) -> None:
    conn = SQSConnectionManager(session=mock_session)
    assert await conn.health_check() is True
    mock_client.list_queues.side_effect = OSError("down")
    assert await conn.health_check() is False


@pytest.mark.asyncio
async def test_failed_delete_does_not_skip_next_message(
    mock_connection: MagicMock, mock_client: MagicMock, caplog: pytest.LogCaptureFixture
) -> None:
    mock_client.receive_message.return_value = {
        "Messages": [
            {"Body": "{}", "ReceiptHandle": "r1"},
            {"Body": "{}", "ReceiptHandle": "r2"},
        ]
    }
    mock_client.delete_message.side_effect = [ConnectionError("timeout"), None]
    handler = AsyncMock()
    consumer = SQSConsumer(mock_connection)
    await consumer.subscribe("new-orders", handler)

    assert await consumer.poll_once() == 2
    assert handler.await_count == 2
    assert mock_client.delete_message.await_count == 2
    assert "Failed to delete message from SQS queue new-orders" in caplog.text


@pytest.mark.asyncio
async def test_queue_lookup_failure_skips_only_that_queue(
    mock_connection: MagicMock, mock_client: MagicMock
) -> None:
    mock_connection.get_queue_url.side_effect = [
        TransportConnectionError("denied"),
        QUEUE_URL,
    ]
    mock_client.receive_message.return_value = {
        "Messages": [{"Body": "{}", "ReceiptHandle": "r1"}]
    }
    broken = AsyncMock()
    healthy = AsyncMock()
    consumer = SQSConsumer(mock_connection, error_backoff=0)
    await consumer.subscribe("forbidden-queue", broken)
    await consumer.subscribe("new-orders", healthy)

    assert await consumer.poll_once() == 1
    broken.assert_not_awaited()
    healthy.assert_awaited_once()


@pytest.mark.asyncio
async def test_polling_loop_survives_client_errors(
    mock_connection: MagicMock, mock_client: MagicMock, caplog: pytest.LogCaptureFixture
) -> None:
    client_errors: list[Exception] = [ConnectionError("endpoint down")]

    async def get_client() -> MagicMock:
        if client_errors:
            raise client_errors.pop(0)
        return mock_client

    batches = [{"Messages": [{"Body": "{}", "ReceiptHandle": "r1"}]}]

    async def receive_message(**kwargs: object) -> dict[str, object]:
        if batches:
            return batches.pop(0)
        await asyncio.sleep(0.01)
        return {}

    mock_connection.get_client.side_effect = get_client
    mock_client.receive_message.side_effect = receive_message
    handler = AsyncMock()
    consumer = SQSConsumer(mock_connection, error_backoff=0)
    await consumer.subscribe("new-orders", handler)

    await consumer.start()
    for _ in range(100):
        if handler.await_count:
            break
        await asyncio.sleep(0.01)
    await consumer.stop()

    handler.assert_awaited_once()
    assert "SQS poll failed" in caplog.text
