"""
Base models.
Provides the shared pydantic configuration for all models.
"""

from pydantic import BaseModel, ConfigDict


class CodeCompactBaseModel(BaseModel):
    """
    Base model for all of codecompact.
    Common configuration and enhanced validation.
    """

    model_config = ConfigDict(
        # Validate values on assignment
        validate_assignment=True,
        # Use enum values
        use_enum_values=True,
        # Prevent extra fields
        extra="forbid",
        # Better documentation
        json_schema_extra={"additionalProperties": False},
    )
