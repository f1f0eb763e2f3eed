"""
Validate prompt inputs before rendering
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError


def _format_pydantic_errors(error: ValidationError) -> List[str]:
    return [
        f"{'.'.join(str(part) for part in item.get('loc', ()))}: {item.get('msg')}"
        for item in error.errors()
    ]


class PromptValidator:
    """Checks that return {valid, errors} instead of raising"""

    @staticmethod
    def validate_variables(required: List[str], provided: Dict[str, Any]) -> Dict[str, Any]:
        missing = [key for key in required if key not in provided]
        return {"valid": not missing, "missing": missing}

    @staticmethod
    def validate_types(model: type, data: Dict[str, Any]) -> Dict[str, Any]:
        """Validate data against a pydantic model"""
        try:
            model.model_validate(data)
            return {"valid": True, "errors": []}
        except ValidationError as e:
            return {"valid": False, "errors": _format_pydantic_errors(e)}

    @staticmethod
    def validate_text_fields(
        data: Dict[str, Any],
        max_length: int = 10000,
        min_length: int = 1
    ) -> Dict[str, Any]:
        errors = []
        for key, value in data.items():
            if isinstance(value, str):
                if len(value) < min_length:
                    errors.append(f"{key}: text too short (min {min_length} chars)")
                if len(value) > max_length:
                    errors.append(f"{key}: text too long (max {max_length} chars)")
        return {"valid": not errors, "errors": errors}

    @staticmethod
    def validate_arrays(data: Dict[str, Any], constraints: Dict[str, Dict[str, int]]) -> Dict[str, Any]:
        """
        Check list sizes.

        Args:
            constraints: {key: {"min": n, "max": m}}
        """
        errors = []
        for key, limits in constraints.items():
            value = data.get(key)
            if not isinstance(value, list):
                errors.append(f"{key}: expected array, got {type(value).__name__}")
                continue
            if limits.get("min") is not None and len(value) < limits["min"]:
                errors.append(f"{key}: array too short (min {limits['min']} items)")
            if limits.get("max") is not None and len(value) > limits["max"]:
                errors.append(f"{key}: array too long (max {limits['max']} items)")
        return {"valid": not errors, "errors": errors}

    @staticmethod
    def validate(
        data: Dict[str, Any],
        required: Optional[List[str]] = None,
        model: Optional[type] = None,
        text_fields: Optional[Dict[str, int]] = None,
        arrays: Optional[Dict[str, Dict[str, int]]] = None
    ) -> Dict[str, Any]:
        """Run every configured check and merge the errors"""
        errors: List[str] = []

        if required:
            result = PromptValidator.validate_variables(required, data)
            errors.extend(f"Missing required field: {key}" for key in result["missing"])

        if model is not None and issubclass(model, BaseModel):
            errors.extend(PromptValidator.validate_types(model, data)["errors"])

        if text_fields is not None:
            errors.extend(PromptValidator.validate_text_fields(data, **text_fields)["errors"])

        if arrays:
            errors.extend(PromptValidator.validate_arrays(data, arrays)["errors"])

        return {"valid": not errors, "errors": errors}
