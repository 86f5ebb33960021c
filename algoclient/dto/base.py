from pydantic import BaseModel, ConfigDict


class BaseInfo(BaseModel):
    """Immutable wire model; field names match the API's snake_case keys."""

    model_config = ConfigDict(
        populate_by_name=True,
        frozen=True,
        extra="ignore",
        use_enum_values=True,
    )
