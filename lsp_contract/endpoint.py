import asyncio
import enum
from typing import (
    Any,
    Awaitable,
    Callable,
    Coroutine,
    Dict,
    List,
    Optional,
    Set,
    Tuple,
    Union,
)

from pydantic import ValidationError

from .common_structures import LogMessageParams, MessageType
from .core import get_logger
from .exceptions import LspContractError, LspError, ShapeError
from .logging_handler import LspLoggingHandler
from .methods import RequestMethodEnum
from .protocol_structures import (
    CancelParams,
    ErrorCodes,
    NotificationMessage,
    RequestMessage,
    ResponseError,
    ResponseMessage,
)
from .registry import MessageDirection, MethodRegistry, ReplyEnvelope
from .request_state import NotificationRecord, PendingRequest
from .rpc_protocol import MessageTransport, RpcProtocolError

logger = get_logger(__name__)

Handler = Callable[[Any], Awaitable[Any]]


class LspEndpoint:
    """
    One side of a connection, client or server. Every outgoing and incoming payload is checked against the
    method registry the endpoint was created with.
    """

    __registry: MethodRegistry
    __transport: MessageTransport
    __run: bool
    __request_id_counter: int
    __pending: Dict[Union[int, str], Tuple[PendingRequest, "asyncio.Future[ReplyEnvelope]"]]
    __running_tasks: Set[asyncio.Task]
    __request_tasks: Dict[Union[int, str], asyncio.Task]
    __cancelled_outgoing: Set[Union[int, str]]
    __cancelled_incoming: Set[Union[int, str]]
    __request_handlers: Dict[str, Handler]
    __notification_handlers: Dict[str, Handler]
    __logging_buffer: List[Tuple[str, MessageType]]

    def __init__(self, registry: MethodRegistry, transport: MessageTransport):
        self.__registry = registry
        self.__transport = transport
        self.__run = True
        self.__request_id_counter = 0
        self.__pending = {}
        self.__running_tasks = set()
        self.__request_tasks = {}
        self.__cancelled_outgoing = set()
        self.__cancelled_incoming = set()
        self.__request_handlers = {}
        self.__notification_handlers = {}
        self.__logging_buffer = []

    @property
    def registry(self) -> MethodRegistry:
        return self.__registry

    @property
    def pending_requests(self) -> Dict[Union[int, str], PendingRequest]:
        return {id: pending for id, (pending, _) in self.__pending.items()}

    def create_logging_handler(self) -> LspLoggingHandler:
        return LspLoggingHandler(self.__logging_buffer)

    def __register_handler(
        self,
        method: Union[str, enum.Enum],
        handler: Handler,
        direction: MessageDirection,
        handlers: Dict[str, Handler],
    ) -> None:
        descriptor = self.__registry[method]
        if descriptor.direction != direction:
            raise ValueError(f"Method '{descriptor.name}' is not a {direction.value}")
        handlers[descriptor.name] = handler

    def on_request(self, method: Union[str, enum.Enum], handler: Handler) -> None:
        self.__register_handler(
            method, handler, MessageDirection.REQUEST, self.__request_handlers
        )

    def on_notification(self, method: Union[str, enum.Enum], handler: Handler) -> None:
        self.__register_handler(
            method, handler, MessageDirection.NOTIFICATION, self.__notification_handlers
        )

    def _task_done_callback(self, task: asyncio.Task) -> None:
        try:
            task.result()
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.exception(e)
        finally:
            self.__running_tasks.discard(task)

    def create_task(self, coroutine: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coroutine)
        self.__running_tasks.add(task)
        task.add_done_callback(self._task_done_callback)
        return task

    def create_request_task(
        self, coroutine: Coroutine, request_id: Union[int, str]
    ) -> asyncio.Task:
        def _callback(task: asyncio.Task) -> None:
            if request_id in self.__request_tasks:
                del self.__request_tasks[request_id]

        task = self.create_task(coroutine)
        self.__request_tasks[request_id] = task
        task.add_done_callback(_callback)
        return task

    async def send_request(
        self, method: Union[str, enum.Enum], params: Any = None
    ) -> Any:
        """
        Send a request and wait for its reply.

        Returns:
            Decoded result of the request.

        Raises:
            LspError: if the peer replied with an error.
        """
        envelope = self.__registry.build_request(method, params)
        request_id = self.__request_id_counter
        self.__request_id_counter += 1

        pending = PendingRequest(request_id, envelope, self.__registry)
        future = asyncio.get_running_loop().create_future()
        self.__pending[request_id] = (pending, future)

        logger.debug(f"Sending request {envelope.method} with id {request_id}")
        # the reply may be dispatched before `send_message` returns
        pending.mark_awaiting()
        try:
            await self.__transport.send_message(envelope.to_message(request_id))
            reply = await future
        finally:
            self.__pending.pop(request_id, None)

        if reply.failed:
            raise LspError(reply.error.code, reply.error.message, reply.error.data)
        return reply.result

    async def cancel_request(self, request_id: Union[int, str]) -> None:
        try:
            pending, future = self.__pending[request_id]
        except KeyError:
            raise ValueError(f"No pending request with id {request_id!r}") from None
        if future.done():
            raise ValueError(f"Request {request_id!r} was already answered")

        pending.cancel()
        self.__cancelled_outgoing.add(request_id)
        future.set_exception(
            LspError(
                ErrorCodes.RequestCancelled,
                f"Request {pending.envelope.method} was cancelled",
            )
        )
        await self.send_notification(
            RequestMethodEnum.CANCEL_REQUEST, CancelParams(id=request_id)
        )

    async def send_notification(
        self, method: Union[str, enum.Enum], params: Any = None
    ) -> NotificationRecord:
        envelope = self.__registry.build_notification(method, params)
        record = NotificationRecord(envelope)
        logger.debug(f"Sending notification {envelope.method}")
        await self.__transport.send_message(envelope.to_message())
        record.mark_delivered()
        return record

    async def log_message(self, message: str, type: MessageType) -> None:
        params = LogMessageParams(
            type=type,
            message=message,
        )
        await self.send_notification(RequestMethodEnum.WINDOW_LOG_MESSAGE, params)

    async def flush_logs(self) -> None:
        """
        Forward all log records collected by handlers of `create_logging_handler` to the peer.
        """
        while len(self.__logging_buffer) > 0:
            message, type = self.__logging_buffer.pop(0)
            await self.log_message(message, type)

    def stop(self) -> None:
        self.__run = False

    async def run(self) -> None:
        """
        Receive and dispatch messages until the `exit` notification arrives or the transport is closed.
        """
        try:
            while self.__run:
                message = await self.__transport.receive_message()
                await self._dispatch(message)
        except (EOFError, ConnectionError):
            logger.debug("Transport closed")
        except RpcProtocolError as e:
            # framing is lost, no further message can be read
            logger.error(f"Closing connection: {e}")
        finally:
            for task in list(self.__running_tasks):
                task.cancel()
            for pending, future in self.__pending.values():
                if not future.done():
                    future.set_exception(
                        ConnectionError(
                            f"Connection closed before {pending.envelope.method} was answered"
                        )
                    )

    async def _dispatch(self, message: Dict[str, Any]) -> None:
        try:
            if "method" in message:
                if "id" in message:
                    request = RequestMessage.model_validate(message)
                    self.create_request_task(self._handle_request(request), request.id)
                else:
                    await self._handle_notification(
                        NotificationMessage.model_validate(message)
                    )
            elif "id" in message:
                self._handle_response(message)
            else:
                logger.error(f"Dropping malformed message: {message}")
        except ValidationError as e:
            logger.error(f"Dropping malformed message: {e}")
        except LspContractError as e:
            logger.exception(e)

    def _handle_response(self, message: Dict[str, Any]) -> None:
        response_id = message["id"]
        if (
            isinstance(response_id, (int, str))
            and response_id in self.__cancelled_outgoing
        ):
            self.__cancelled_outgoing.discard(response_id)
            logger.debug(f"Ignoring reply to cancelled request {response_id!r}")
            return

        if (
            not isinstance(response_id, (int, str))
            or response_id not in self.__pending
        ):
            logger.error(
                f"Received response with id {response_id!r} but no such request is pending."
            )
            return

        pending, future = self.__pending[response_id]
        if future.done():
            logger.debug(f"Ignoring late response to request {response_id!r}")
            return

        try:
            reply = self.__registry.accept_response(pending.envelope.method, message)
        except ShapeError as e:
            logger.error(str(e))
            future.set_exception(e)
            return
        try:
            pending.resolve(reply)
        except LspContractError as e:
            logger.exception(e)
            future.set_exception(e)
            return
        future.set_result(reply)

    async def _serve_error(
        self,
        request: RequestMessage,
        error_code: int,
        msg: str,
        data: Optional[Any] = None,
    ) -> None:
        response_error = ResponseError(code=error_code, message=msg, data=data)
        descriptor = self.__registry.lookup(request.method)
        if descriptor is not None and descriptor.is_request:
            response = self.__registry.build_reply(
                request.method, error=response_error
            ).to_message(request.id)
        else:
            response = ResponseMessage(
                jsonrpc="2.0", id=request.id, error=response_error
            ).model_dump(
                mode="json", by_alias=True, exclude_unset=True, exclude_none=True
            )
        logger.warning(f"Serving error response: {response}")
        await self.__transport.send_message(response)

    async def _handle_request(self, request: RequestMessage) -> None:
        logger.debug(f"Request received: {request.method} with id {request.id}")
        descriptor = self.__registry.lookup(request.method)
        handler = self.__request_handlers.get(request.method)
        if descriptor is None or not descriptor.is_request or handler is None:
            await self._serve_error(
                request, ErrorCodes.MethodNotFound, f"Unknown method: {request.method}"
            )
            return

        try:
            params = self.__registry.decode_params(request.method, request.params)
        except ShapeError as e:
            await self._serve_error(request, ErrorCodes.InvalidParams, str(e))
            return

        try:
            result = await handler(params)
            reply = self.__registry.build_reply(request.method, result)
        except LspError as e:
            await self._serve_error(request, e.code, e.message, e.data)
            return
        except ShapeError as e:
            logger.error(str(e))
            await self._serve_error(request, ErrorCodes.InternalError, str(e))
            return
        except asyncio.CancelledError:
            if request.id in self.__cancelled_incoming:
                self.__cancelled_incoming.discard(request.id)
                await self._serve_error(
                    request,
                    ErrorCodes.RequestCancelled,
                    f"Request {request.method} was cancelled",
                )
            raise
        except Exception as e:
            logger.exception(e)
            await self._serve_error(request, ErrorCodes.InternalError, str(e))
            return
        await self.__transport.send_message(reply.to_message(request.id))

    async def _handle_notification(self, notification: NotificationMessage) -> None:
        logger.debug(f"Notification received: {notification.method}")
        descriptor = self.__registry.lookup(notification.method)
        if descriptor is None or descriptor.is_request:
            if not notification.method.startswith("$/"):
                logger.warning(
                    f"Incoming notification type '{notification.method}' not implemented."
                )
            return

        try:
            params = self.__registry.decode_params(
                notification.method, notification.params
            )
        except ShapeError as e:
            logger.error(str(e))
            return

        if notification.method == RequestMethodEnum.CANCEL_REQUEST:
            task = self.__request_tasks.get(params.id)
            if task is not None and not task.done():
                self.__cancelled_incoming.add(params.id)
                task.cancel()
        elif notification.method == RequestMethodEnum.EXIT:
            self.__run = False

        handler = self.__notification_handlers.get(notification.method)
        if handler is None:
            return
        try:
            await handler(params)
        except Exception as e:
            logger.exception(e)
