"""
Validate individual template variables by declared type and bounds
"""

from typing import Any, Dict, List, Optional

from pydantic import TypeAdapter, ValidationError

_TYPE_ADAPTERS = {
    "string": TypeAdapter(str),
    "number": TypeAdapter(float),
    "boolean": TypeAdapter(bool),
    "array": TypeAdapter(List[Any]),
    "object": TypeAdapter(Dict[str, Any]),
}


class VariableValidator:
    """Strict per-variable checks (no coercion: "5" is not a number)"""

    @staticmethod
    def validate_variable(
        name: str,
        value: Any,
        type: str,
        required: bool = False,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
        min: Optional[float] = None,
        max: Optional[float] = None
    ) -> Dict[str, Any]:
        """
        Validate one variable.

        Returns:
            {"valid": bool, "error": message or None}
        """
        if value is None:
            if required:
                return {"valid": False, "error": f"{name} is required"}
            return {"valid": True, "error": None}

        adapter = _TYPE_ADAPTERS.get(type)
        if adapter is not None:
            try:
                adapter.validate_python(value, strict=True)
            except ValidationError as e:
                return {"valid": False, "error": f"{name}: {e.errors()[0].get('msg')}"}

        if type == "string" and isinstance(value, str):
            if min_length and len(value) < min_length:
                return {"valid": False, "error": f"{name}: too short (min {min_length} chars)"}
            if max_length and len(value) > max_length:
                return {"valid": False, "error": f"{name}: too long (max {max_length} chars)"}

        if type == "number" and isinstance(value, (int, float)):
            if min is not None and value < min:
                return {"valid": False, "error": f"{name}: too small (min {min})"}
            if max is not None and value > max:
                return {"valid": False, "error": f"{name}: too large (max {max})"}

        return {"valid": True, "error": None}

    @staticmethod
    def validate_all(variables: Dict[str, Any], schema: Dict[str, Dict[str, Any]]) -> Dict[str, Any]:
        """
        Validate every variable named in schema.

        Args:
            schema: {name: {type, required, min_length, max_length, min, max}}
        """
        errors = []
        for name, rules in schema.items():
            result = VariableValidator.validate_variable(name, variables.get(name), **rules)
            if not result["valid"]:
                errors.append(result["error"])
        return {"valid": not errors, "errors": errors}
