"""
Dispatch of algorithm input to user handlers.

An :class:`EntryPoint` is a table of handlers keyed by the input shape they
accept. Handlers are registered with decorators::

    ep = EntryPoint()

    @ep.text
    def greet(name):
        return f"Hello {name}"

    @ep.decoded(List[int])
    def total(numbers):
        return sum(numbers)

With a ``state_factory`` every handler also receives the state object,
created once per process on the first call.
"""

from __future__ import annotations

import enum
import logging
import threading
from typing import Any, Callable, Dict, Optional, Type

from pydantic import TypeAdapter, ValidationError

from algoclient.dto.algo_io import AlgoIo, ContentType
from algoclient.exceptions import ContentTypeError, UnsupportedInput

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]

_UNSET = object()


class InputShape(str, enum.Enum):
    TEXT = "text"
    JSON = "json"
    BINARY = "binary"


class EntryPoint:
    def __init__(self, state_factory: Optional[Callable[[], Any]] = None):
        self._handlers: Dict[InputShape, Handler] = {}
        self._state_factory = state_factory
        self._state = _UNSET
        self._state_lock = threading.Lock()

    @classmethod
    def from_function(cls, func: Handler) -> "EntryPoint":
        """Entry point that passes every input shape to ``func``."""
        entrypoint = cls()
        for shape in InputShape:
            entrypoint.register(shape, func)
        return entrypoint

    def register(self, shape: InputShape, func: Handler) -> Handler:
        shape = InputShape(shape)
        if shape in self._handlers:
            raise ValueError(f"A {shape.value} handler is already registered")
        self._handlers[shape] = func
        return func

    def text(self, func: Handler) -> Handler:
        return self.register(InputShape.TEXT, func)

    def json(self, func: Handler) -> Handler:
        return self.register(InputShape.JSON, func)

    def binary(self, func: Handler) -> Handler:
        return self.register(InputShape.BINARY, func)

    def decoded(self, type_: Type[Any]) -> Callable[[Handler], Handler]:
        """
        Registers a JSON handler that receives the input validated into ``type_``.

        Input that does not match ``type_`` is rejected with
        :class:`UnsupportedInput`.
        """
        adapter = TypeAdapter(type_)

        def decorator(func: Handler) -> Handler:
            def apply_decoded(value: Any, *state: Any) -> Any:
                try:
                    decoded = adapter.validate_python(value)
                except ValidationError as exc:
                    raise UnsupportedInput(
                        f"Failed to parse input as JSON into the expected type: {exc}"
                    ) from exc
                return func(decoded, *state)

            self.register(InputShape.JSON, apply_decoded)
            return func

        return decorator

    @property
    def accepts(self) -> frozenset:
        return frozenset(self._handlers)

    @property
    def state(self) -> Any:
        """The preloaded state, created on first access."""
        if self._state_factory is None:
            return None
        if self._state is _UNSET:
            with self._state_lock:
                if self._state is _UNSET:
                    logger.info("Loading algorithm state")
                    self._state = self._state_factory()
        return self._state

    def apply(self, input: Any) -> AlgoIo:
        """
        Routes ``input`` to the matching handler.

        Text goes to the text handler and falls back to the JSON handler
        when the text parses as JSON. JSON goes to the JSON handler and
        falls back to the text handler when the value is a string. Binary
        only goes to the binary handler.

        :raises UnsupportedInput: if no handler accepts the input.
        """
        input = AlgoIo.from_value(input)

        if input.content_type == ContentType.TEXT:
            try:
                return self._call(InputShape.TEXT, input.value)
            except UnsupportedInput:
                try:
                    value = input.as_json()
                except ContentTypeError as exc:
                    raise UnsupportedInput("Text input is not accepted") from exc
                return self._call(InputShape.JSON, value)
        elif input.content_type == ContentType.JSON:
            try:
                return self._call(InputShape.JSON, input.value)
            except UnsupportedInput:
                if not isinstance(input.value, str):
                    raise
                return self._call(InputShape.TEXT, input.value)
        elif input.content_type == ContentType.BINARY:
            return self._call(InputShape.BINARY, input.value)
        else:
            raise UnsupportedInput(f"Unknown content type: {input.content_type}")

    def __call__(self, input: Any) -> AlgoIo:
        return self.apply(input)

    def _call(self, shape: InputShape, value: Any) -> AlgoIo:
        handler = self._handlers.get(shape)
        if handler is None:
            raise UnsupportedInput(f"No handler accepts {shape.value} input")
        if self._state_factory is not None:
            result = handler(value, self.state)
        else:
            result = handler(value)
        return AlgoIo.from_value(result)
