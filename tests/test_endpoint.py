import asyncio
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import pytest

from lsp_contract.catalogs import STANDARD
from lsp_contract.common_structures import MessageType
from lsp_contract.config import TransportConfig
from lsp_contract.endpoint import LspEndpoint
from lsp_contract.exceptions import LspError
from lsp_contract.features.hover import Hover
from lsp_contract.methods import RequestMethodEnum
from lsp_contract.protocol_structures import ErrorCodes
from lsp_contract.request_state import NotificationState, RequestState
from lsp_contract.rpc_protocol import RpcProtocol, RpcProtocolError

HOVER = RequestMethodEnum.HOVER
HOVER_PARAMS = {
    "textDocument": {"uri": "file:///a.txt"},
    "position": {"line": 3, "character": 7},
}


class QueueTransport:
    def __init__(self, inbox: asyncio.Queue, outbox: asyncio.Queue):
        self.inbox = inbox
        self.outbox = outbox

    async def send_message(self, message: Dict[str, Any]) -> None:
        await self.outbox.put(message)

    async def receive_message(self) -> Dict[str, Any]:
        message = await self.inbox.get()
        if message is None:
            raise EOFError()
        if isinstance(message, Exception):
            raise message
        return message

    async def close(self) -> None:
        await self.inbox.put(None)


class YieldingTransport(QueueTransport):
    """
    Lets other tasks run after a message is queued, as a real writer would while draining.
    """

    async def send_message(self, message: Dict[str, Any]) -> None:
        await self.outbox.put(message)
        for _ in range(5):
            await asyncio.sleep(0)


def _pair() -> Tuple[QueueTransport, QueueTransport]:
    a: asyncio.Queue = asyncio.Queue()
    b: asyncio.Queue = asyncio.Queue()
    return QueueTransport(a, b), QueueTransport(b, a)


async def _hover(params) -> Optional[Hover]:
    return Hover(contents=f"line {params.position.line}")


class Connection:
    """
    Client and server endpoints connected through in-memory queues.
    """

    def __init__(self):
        self.client_transport, self.server_transport = _pair()
        self.client = LspEndpoint(STANDARD, self.client_transport)
        self.server = LspEndpoint(STANDARD, self.server_transport)

    async def __aenter__(self) -> "Connection":
        self.tasks = [
            asyncio.create_task(self.server.run()),
            asyncio.create_task(self.client.run()),
        ]
        return self

    async def __aexit__(self, *args) -> None:
        await self.client.send_notification(RequestMethodEnum.EXIT)
        await self.client_transport.close()
        await asyncio.gather(*self.tasks)


def test_request_round_trip():
    async def main():
        async with Connection() as connection:
            connection.server.on_request(HOVER, _hover)
            result = await connection.client.send_request(HOVER, HOVER_PARAMS)
            assert connection.client.pending_requests == {}
            return result

    assert asyncio.run(main()) == Hover(contents="line 3")


def test_request_without_params():
    async def main():
        async with Connection() as connection:

            async def shutdown(params):
                assert params is None
                return None

            connection.server.on_request(RequestMethodEnum.SHUTDOWN, shutdown)
            return await connection.client.send_request(RequestMethodEnum.SHUTDOWN)

    assert asyncio.run(main()) is None


def test_error_reply():
    async def failing(params):
        raise LspError(ErrorCodes.RequestFailed, "no hover here", {"reason": "test"})

    async def main():
        async with Connection() as connection:
            connection.server.on_request(HOVER, failing)
            with pytest.raises(LspError) as e:
                await connection.client.send_request(HOVER, HOVER_PARAMS)
            return e.value

    error = asyncio.run(main())
    assert error.code == ErrorCodes.RequestFailed
    assert error.message == "no hover here"
    assert error.data == {"reason": "test"}


def test_method_without_handler():
    async def main():
        async with Connection() as connection:
            with pytest.raises(LspError) as e:
                await connection.client.send_request(HOVER, HOVER_PARAMS)
            return e.value

    assert asyncio.run(main()).code == ErrorCodes.MethodNotFound


def test_handler_registration():
    endpoint = LspEndpoint(STANDARD, QueueTransport(asyncio.Queue(), asyncio.Queue()))
    with pytest.raises(ValueError):
        endpoint.on_request(RequestMethodEnum.EXIT, _hover)
    with pytest.raises(ValueError):
        endpoint.on_notification(HOVER, _hover)


def test_raw_messages():
    async def main():
        inbox: asyncio.Queue = asyncio.Queue()
        outbox: asyncio.Queue = asyncio.Queue()
        server = LspEndpoint(STANDARD, QueueTransport(inbox, outbox))
        server.on_request(HOVER, _hover)
        task = asyncio.create_task(server.run())

        replies = []
        for message in [
            {"jsonrpc": "2.0", "id": 1, "method": "textDocument/hover", "params": {}},
            {"jsonrpc": "2.0", "id": 2, "method": "textDocument/rename", "params": {}},
            {"jsonrpc": "2.0", "id": 3, "method": "exit"},
            {"jsonrpc": "2.0", "id": 4, "method": "textDocument/hover", "params": HOVER_PARAMS},
        ]:
            await inbox.put(message)
            replies.append(await outbox.get())

        # unknown $/ notifications are ignored, this one must not produce any reply
        await inbox.put({"jsonrpc": "2.0", "method": "$/progress", "params": {}})
        await inbox.put(None)
        await task
        return replies, outbox.qsize()

    replies, remaining = asyncio.run(main())
    assert remaining == 0
    assert [r["id"] for r in replies] == [1, 2, 3, 4]
    assert replies[0]["error"]["code"] == ErrorCodes.InvalidParams
    assert replies[1] == {
        "jsonrpc": "2.0",
        "id": 2,
        "error": {
            "code": ErrorCodes.MethodNotFound,
            "message": "Unknown method: textDocument/rename",
        },
    }
    assert replies[2]["error"]["code"] == ErrorCodes.MethodNotFound
    assert replies[3] == {"jsonrpc": "2.0", "id": 4, "result": {"contents": "line 3"}}


def test_cancel_request():
    async def main():
        started = asyncio.Event()
        cancelled = asyncio.Event()

        async def slow(params):
            started.set()
            try:
                await asyncio.sleep(60)
            except asyncio.CancelledError:
                cancelled.set()
                raise

        async with Connection() as connection:
            connection.server.on_request(HOVER, slow)
            request = asyncio.create_task(
                connection.client.send_request(HOVER, HOVER_PARAMS)
            )
            await started.wait()
            pending = connection.client.pending_requests[0]

            await connection.client.cancel_request(0)
            with pytest.raises(LspError) as e:
                await request
            await asyncio.wait_for(cancelled.wait(), 5)

            with pytest.raises(ValueError):
                await connection.client.cancel_request(0)
            return e.value, pending

    error, pending = asyncio.run(main())
    assert error.code == ErrorCodes.RequestCancelled
    assert pending.state == RequestState.CANCELLED


def test_notifications_and_logs():
    received: List[Tuple[str, MessageType]] = []

    async def on_log(params):
        received.append((params.message, params.type))

    async def main():
        async with Connection() as connection:
            connection.client.on_notification(
                RequestMethodEnum.WINDOW_LOG_MESSAGE, on_log
            )
            record = await connection.server.send_notification(
                RequestMethodEnum.WINDOW_SHOW_MESSAGE, {"type": 3, "message": "hi"}
            )

            logger = logging.getLogger("lsp_contract.tests.forwarded")
            logger.propagate = False
            logger.setLevel(logging.INFO)
            handler = connection.server.create_logging_handler()
            logger.addHandler(handler)
            try:
                logger.info("indexing")
                logger.error("failed")
            finally:
                logger.removeHandler(handler)
            await connection.server.flush_logs()

            # round trip to be sure the log notifications were processed
            connection.client.on_request(HOVER, _hover)
            await connection.server.send_request(HOVER, HOVER_PARAMS)
            return record

    record = asyncio.run(main())
    assert record.state == NotificationState.DELIVERED
    assert received == [
        ("lsp_contract.tests.forwarded: indexing", MessageType.INFO),
        ("lsp_contract.tests.forwarded: failed", MessageType.ERROR),
    ]


def test_pending_requests_fail_on_close():
    async def main():
        client_transport, server_transport = _pair()
        client = LspEndpoint(STANDARD, client_transport)
        task = asyncio.create_task(client.run())
        request = asyncio.create_task(client.send_request(HOVER, HOVER_PARAMS))
        await server_transport.receive_message()
        await client_transport.close()
        await task
        with pytest.raises(ConnectionError):
            await request

    asyncio.run(main())


def test_reply_before_send_returns():
    async def main():
        a: asyncio.Queue = asyncio.Queue()
        b: asyncio.Queue = asyncio.Queue()
        client = LspEndpoint(STANDARD, YieldingTransport(a, b))
        server = LspEndpoint(STANDARD, YieldingTransport(b, a))
        server.on_request(HOVER, _hover)
        tasks = [asyncio.create_task(server.run()), asyncio.create_task(client.run())]

        first = await asyncio.wait_for(client.send_request(HOVER, HOVER_PARAMS), 5)
        second = await asyncio.wait_for(client.send_request(HOVER, HOVER_PARAMS), 5)
        still_running = not tasks[1].done()

        await client.send_notification(RequestMethodEnum.EXIT)
        await a.put(None)
        await asyncio.gather(*tasks)
        return first, second, still_running

    first, second, still_running = asyncio.run(main())
    assert first == second == Hover(contents="line 3")
    assert still_running


def test_pending_requests_fail_on_protocol_error():
    async def main():
        client_transport, server_transport = _pair()
        client = LspEndpoint(STANDARD, client_transport)
        task = asyncio.create_task(client.run())
        request = asyncio.create_task(client.send_request(HOVER, HOVER_PARAMS))
        await server_transport.receive_message()
        await client_transport.inbox.put(
            RpcProtocolError("Missing Content-Length header")
        )
        await asyncio.wait_for(task, 5)
        with pytest.raises(ConnectionError):
            await asyncio.wait_for(request, 5)

    asyncio.run(main())


def test_handler_exception_reply():
    async def broken(params):
        raise RuntimeError("handler bug")

    async def main():
        async with Connection() as connection:
            connection.server.on_request(HOVER, broken)
            with pytest.raises(LspError) as e:
                await connection.client.send_request(HOVER, HOVER_PARAMS)

            connection.server.on_request(HOVER, _hover)
            result = await connection.client.send_request(HOVER, HOVER_PARAMS)
            return e.value, result

    error, result = asyncio.run(main())
    assert error.code == ErrorCodes.InternalError
    assert error.message == "handler bug"
    assert result == Hover(contents="line 3")


def test_cancelled_request_reply():
    async def main():
        inbox: asyncio.Queue = asyncio.Queue()
        outbox: asyncio.Queue = asyncio.Queue()
        server = LspEndpoint(STANDARD, QueueTransport(inbox, outbox))
        started = asyncio.Event()

        async def slow(params):
            started.set()
            await asyncio.sleep(60)

        server.on_request(HOVER, slow)
        task = asyncio.create_task(server.run())

        await inbox.put(
            {"jsonrpc": "2.0", "id": 1, "method": "textDocument/hover", "params": HOVER_PARAMS}
        )
        await asyncio.wait_for(started.wait(), 5)
        await inbox.put(
            {"jsonrpc": "2.0", "method": "$/cancelRequest", "params": {"id": 1}}
        )
        reply = await asyncio.wait_for(outbox.get(), 5)
        await inbox.put(None)
        await task
        return reply

    reply = asyncio.run(main())
    assert reply["id"] == 1
    assert reply["error"]["code"] == ErrorCodes.RequestCancelled
    assert "result" not in reply


def test_notification_handler_exception():
    async def broken(params):
        raise RuntimeError("handler bug")

    async def main():
        async with Connection() as connection:
            connection.client.on_notification(
                RequestMethodEnum.WINDOW_SHOW_MESSAGE, broken
            )
            connection.client.on_request(HOVER, _hover)
            await connection.server.send_notification(
                RequestMethodEnum.WINDOW_SHOW_MESSAGE, {"type": 3, "message": "hi"}
            )
            return await connection.server.send_request(HOVER, HOVER_PARAMS)

    assert asyncio.run(main()) == Hover(contents="line 3")


class BufferWriter:
    def __init__(self):
        self.data = bytearray()

    def write(self, data: bytes) -> None:
        self.data.extend(data)

    async def drain(self) -> None:
        pass


def _frame(body: str) -> bytes:
    return f"Content-Length: {len(body)}\r\n\r\n{body}".encode("utf-8")


def test_rpc_protocol_send():
    async def main():
        writer = BufferWriter()
        protocol = RpcProtocol(asyncio.StreamReader(), writer)  # type: ignore
        await protocol.send_message({"jsonrpc": "2.0", "method": "exit"})
        return bytes(writer.data)

    body = json.dumps({"jsonrpc": "2.0", "method": "exit"}, separators=(",", ":"))
    assert asyncio.run(main()) == (
        f"Content-Length: {len(body)}\r\n"
        "Content-Type: application/vscode-jsonrpc; charset=utf-8\r\n"
        f"\r\n{body}"
    ).encode("utf-8")


def test_rpc_protocol_receive():
    async def main():
        reader = asyncio.StreamReader()
        reader.feed_data(_frame('{"jsonrpc":"2.0","method":"exit"}'))
        reader.feed_data(
            b"content-length: 2\r\nContent-Type: application/vscode-jsonrpc\r\n\r\n{}"
        )
        reader.feed_eof()
        protocol = RpcProtocol(reader, BufferWriter())  # type: ignore

        messages = [await protocol.receive_message(), await protocol.receive_message()]
        with pytest.raises(EOFError):
            await protocol.receive_message()
        return messages

    assert asyncio.run(main()) == [{"jsonrpc": "2.0", "method": "exit"}, {}]


@pytest.mark.parametrize(
    "data",
    [
        b"Content-Type: application/vscode-jsonrpc\r\n\r\n{}",
        b"Content-Length: two\r\n\r\n{}",
        b"Content-Length 2\r\n\r\n{}",
        _frame("[1, 2]"),
        _frame("{invalid"),
        _frame('{"params": "' + "x" * 64 + '"}'),
    ],
)
def test_rpc_protocol_errors(data):
    async def main():
        reader = asyncio.StreamReader()
        reader.feed_data(data)
        reader.feed_eof()
        protocol = RpcProtocol(
            reader, BufferWriter(), TransportConfig(max_content_length=32)  # type: ignore
        )
        with pytest.raises(RpcProtocolError):
            await protocol.receive_message()

    asyncio.run(main())
