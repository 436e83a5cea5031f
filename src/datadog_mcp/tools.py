"""Tool definitions for the MCP dispatcher."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from datadog_mcp.errors import InvalidParamsError


class ToolParameters(BaseModel):
    """Base parameters schema for MCP tools."""

    model_config = ConfigDict(extra="forbid")


def describe_validation_error(error: ValidationError) -> str:
    """Flatten a pydantic validation error into a single line."""
    problems = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "arguments"
        problems.append(f"{location}: {item['msg']}")
    return "; ".join(problems)


@dataclass(frozen=True)
class ToolDefinition:
    """Description of a tool that can be registered with the server.

    Attributes:
        name: Unique name of the tool.
        description: Human-readable description of the tool purpose.
        parameters_model: Pydantic model used to validate input parameters.
        handler: Callable that executes the tool logic on validated parameters.
        input_schema: Explicit JSON schema advertised by ``tools/list``. When
            omitted the schema is generated from ``parameters_model``.
        normalizer: Optional callable replacing the default validation step,
            for tools whose arguments need more than a model round-trip.
    """

    name: str
    description: str
    parameters_model: type[ToolParameters]
    handler: Callable[[Any], Dict[str, Any]]
    input_schema: Optional[Dict[str, Any]] = None
    normalizer: Optional[Callable[[Dict[str, Any]], Any]] = None

    def validate(self, parameters: Dict[str, Any]) -> Any:
        """Validate and coerce incoming tool parameters.

        Args:
            parameters: Input arguments provided for the tool.

        Raises:
            InvalidParamsError: If parameter validation fails.

        Returns:
            The normalized parameters handed to :attr:`handler`.
        """

        if self.normalizer is not None:
            return self.normalizer(parameters)
        try:
            model = self.parameters_model.model_validate(parameters)
        except ValidationError as error:
            raise InvalidParamsError(
                f"invalid arguments for tool '{self.name}': "
                f"{describe_validation_error(error)}"
            ) from error
        return model

    def invoke(self, parameters: Dict[str, Any]) -> Dict[str, Any]:
        """Validate ``parameters`` and run the handler on the result."""

        return self.handler(self.validate(parameters))

    def descriptor(self) -> Dict[str, Any]:
        """Return the ``tools/list`` entry for this tool."""

        schema = self.input_schema
        if schema is None:
            schema = self.parameters_model.model_json_schema()
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": copy.deepcopy(schema),
        }
