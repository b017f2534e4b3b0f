"""
Shared schema base classes
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """snake_case in Python, camelCase on the wire"""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ApiResponse(CamelModel):
    """Envelope fields present on every JSON response"""
    success: bool = True
    message: str = ""


def clean_text(value) -> str:
    """Strip form input; null counts as empty"""
    if value is None:
        return ""
    return str(value).strip()
