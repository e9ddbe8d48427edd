"""Execution contexts: places a probe pass can be shipped to and run in."""
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Protocol, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteFunction:
    """A function that can run in a browser page or in-process.

    `javascript` is a JS function expression. `python` is an async callable
    taking the context's global object, then one value per dependency, then
    the call arguments.
    """
    name: str
    javascript: str
    python: Optional[Callable[..., Awaitable[Any]]] = None


@dataclass(frozen=True)
class ScriptDependency:
    """Code or data made available to a RemoteFunction as a leading argument.

    A browser context evaluates `source`, which must define `binding`. An
    in-process context passes `value` directly.
    """
    binding: str
    source: str = ""
    value: Any = None


class ExecutionContext(Protocol):
    async def evaluate(
        self,
        function: RemoteFunction,
        args: Sequence[Any] = (),
        deps: Sequence[ScriptDependency] = (),
    ) -> Any:
        ...


def structured_clone(value: Any) -> Any:
    """Copy a result the way it would come back over a wire: plain data only.

    Raises TypeError for values that are not JSON-representable.
    """
    return json.loads(json.dumps(value, allow_nan=True))


class LocalExecutionContext:
    """Runs RemoteFunctions in this process against a given global object.

    Useful for Python-defined signature catalogs and for exercising the probe
    protocol without a browser.
    """

    def __init__(self, global_object: Any = None):
        self.global_object = global_object

    async def evaluate(
        self,
        function: RemoteFunction,
        args: Sequence[Any] = (),
        deps: Sequence[ScriptDependency] = (),
    ) -> Any:
        if function.python is None:
            raise TypeError(f"{function.name} has no in-process implementation")
        logger.debug(f"Evaluating {function.name} in-process with {len(deps)} dependencies")
        dep_values = [dep.value for dep in deps]
        result = await function.python(self.global_object, *dep_values, *args)
        return structured_clone(result)
