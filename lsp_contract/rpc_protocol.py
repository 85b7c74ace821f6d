import asyncio
import json
from typing import Any, Dict, Optional

from typing_extensions import Protocol

from .config.data_model import TransportConfig
from .core import get_logger
from .exceptions import LspContractError

logger = get_logger(__name__)


class RpcProtocolError(LspContractError):
    pass


class MessageTransport(Protocol):
    """
    Anything able to send and receive one JSON-RPC message object at a time.
    """

    async def send_message(self, message: Dict[str, Any]) -> None:
        ...

    async def receive_message(self) -> Dict[str, Any]:
        ...


class RpcProtocol:
    """
    Json rpc communication over a pair of asyncio streams using `Content-Length` framing.
    """

    __reader: asyncio.StreamReader
    __writer: asyncio.StreamWriter
    __lock: asyncio.Lock
    __config: TransportConfig

    def __init__(
        self,
        reader: asyncio.StreamReader,
        writer: asyncio.StreamWriter,
        config: Optional[TransportConfig] = None,
    ):
        self.__reader = reader
        self.__writer = writer
        self.__lock = asyncio.Lock()
        self.__config = config if config is not None else TransportConfig()

    async def _read_headers(self) -> Dict[str, str]:
        headers = {}
        while True:
            raw_line = await self.__reader.readline()
            if len(raw_line) == 0:
                raise EOFError("Stream closed while reading message headers")
            line = raw_line.decode("ascii")
            if line == "\r\n":
                break
            if not line.endswith("\r\n") or ":" not in line:
                raise RpcProtocolError(f"Invalid HTTP header: {line!r}")
            name, value = line[:-2].split(":", 1)
            headers[name.strip().lower()] = value.strip()
        return headers

    async def _read_message(self) -> Any:
        headers = await self._read_headers()
        try:
            content_length = int(headers["content-length"])
        except KeyError:
            raise RpcProtocolError("Missing Content-Length header") from None
        except ValueError:
            raise RpcProtocolError(
                f"Invalid Content-Length header: {headers['content-length']!r}"
            ) from None
        if content_length < 0 or content_length > self.__config.max_content_length:
            raise RpcProtocolError(
                f"Content-Length {content_length} out of bounds (max {self.__config.max_content_length})"
            )

        content = await self.__reader.readexactly(content_length)
        logger.debug(f"Received message of {content_length} bytes")
        try:
            return json.loads(content.decode(self.__config.encoding))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise RpcProtocolError(f"Invalid message content: {e}") from e

    async def receive_message(self) -> Dict[str, Any]:
        message = await self._read_message()
        if not isinstance(message, dict):
            raise RpcProtocolError(
                f"Expected a JSON object, got {type(message).__name__}"
            )
        return message

    async def _send(self, message: str) -> None:
        encoded_message = message.encode(self.__config.encoding)
        content_length = len(encoded_message)
        response = (
            f"Content-Length: {content_length}\r\nContent-Type: {self.__config.content_type}; charset={self.__config.encoding}\r\n\r\n".encode(
                "ascii"
            )
            + encoded_message
        )
        async with self.__lock:
            self.__writer.write(response)
            await self.__writer.drain()

    async def send_message(self, message: Dict[str, Any]) -> None:
        await self._send(json.dumps(message, separators=(",", ":")))
