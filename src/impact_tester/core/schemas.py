"""
Response models for the generation calls.

Each stage declares its response shape once, as a pydantic model. The
Gemini responseSchema sent with the request (an OpenAPI subset: type,
properties, items, propertyOrdering) is derived from the same model, and
the parsed response is validated against it.
"""
from typing import Any, Dict, List, get_args, get_origin

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, model_validator


class _ResponseModel(BaseModel):
    """Base for response models; null values fall back to field defaults"""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class ScenarioModel(_ResponseModel):
    """Schema for one generated test scenario"""
    jiraId: str = Field(default="", description="Jira ticket identifier")
    feature: str = Field(default="", description="Feature under test, with the technique in parentheses")
    scenario: str = Field(default="", description="Scenario title starting with 'Validar '")
    given: str = Field(default="", description="Gherkin preconditions")
    when: str = Field(default="", description="Gherkin action")
    then: str = Field(default="", description="Gherkin expected outcome")
    priority: str = Field(default="", description="Alta, Media or Baja")


class PrimaryResponse(_ResponseModel):
    """Complete response schema for the primary analysis"""
    testCases: List[ScenarioModel] = Field(default_factory=list, description="Generated test scenarios")
    impacts: str = Field(default="", description="Potential impacts, one per line")
    regressionTests: str = Field(default="", description="Suggested regression tests, one per line")


# The regression conversion answers with a bare array of scenarios
RegressionResponse = List[ScenarioModel]

_SCALAR_TYPES = {
    str: "STRING",
    int: "INTEGER",
    float: "NUMBER",
    bool: "BOOLEAN",
}


def response_schema(response_model: Any) -> Dict[str, Any]:
    """
    Gemini responseSchema for a response model.

    Args:
        response_model: A pydantic model class, a List[...] of one, or a
            scalar type

    Returns:
        Schema descriptor with properties in field declaration order

    Example:
        >>> response_schema(List[str])
        {'type': 'ARRAY', 'items': {'type': 'STRING'}}
    """
    if isinstance(response_model, type) and issubclass(response_model, BaseModel):
        fields = response_model.model_fields
        return {
            "type": "OBJECT",
            "properties": {name: response_schema(info.annotation) for name, info in fields.items()},
            "propertyOrdering": list(fields),
        }
    if get_origin(response_model) is list:
        (item_type,) = get_args(response_model)
        return {"type": "ARRAY", "items": response_schema(item_type)}
    if response_model in _SCALAR_TYPES:
        return {"type": _SCALAR_TYPES[response_model]}
    raise ValueError(f"Unsupported response type: {response_model!r}")


def validate_response(value: Any, response_model: Any) -> Any:
    """
    Validate a parsed JSON value against a response model.

    Model instances pass through unchanged.

    Raises:
        pydantic.ValidationError: The value does not have the model's shape
    """
    return TypeAdapter(response_model).validate_python(value)


def describe_validation_error(error: ValidationError) -> str:
    """
    First validation error as "<json path>: <message>".

    Example: "$.testCases[0].given: Input should be a valid string"
    """
    first = error.errors()[0]
    path = "$" + "".join(f"[{part}]" if isinstance(part, int) else f".{part}" for part in first["loc"])
    return f"{path}: {first['msg']}"
