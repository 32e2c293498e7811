"""
Base models for device description metadata.

Provides shared base models with centralized configuration for all
schema classes. Using these base models eliminates repetitive
``model_config`` declarations across the codebase.

Architecture Decision:
    Schema objects are frozen: a loaded device description is shared
    read-only by every decode/encode call, so no field may change after
    validation. Two ``extra`` policies exist:
    StrictModel (extra="forbid") is for settings and top-level objects
    where extra fields indicate user typos.
    FlexibleModel (extra="ignore") is for GSDML-derived records where
    vendor-specific attributes should be silently dropped.
"""

from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class GsdBaseModel(BaseModel):
    """Base model with shared configuration for all schema models.

    Provides camelCase aliasing, immutability, and allows field
    population by either alias or Python name.
    """

    model_config = {
        "frozen": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class StrictModel(GsdBaseModel):
    """Base model that forbids unknown fields.

    Use for settings and top-level objects where extra fields likely
    indicate user typos (e.g., Settings, DeviceDescription).
    """

    model_config = {
        **GsdBaseModel.model_config,
        "extra": "forbid",
    }


class FlexibleModel(GsdBaseModel):
    """Base model that silently ignores unknown fields.

    Use for records lifted from GSDML attributes where vendor
    extensions should be accepted without errors.
    """

    model_config = {
        **GsdBaseModel.model_config,
        "extra": "ignore",
    }
