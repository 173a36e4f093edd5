"""Screen model consumed by the navigation graph algorithms.

Screens come from an externally generated catalog (camelCase JSON), so the
model accepts both the catalog's field names and Python names.
"""

from pydantic import BaseModel, ConfigDict, Field


class Screen(BaseModel):
    """One catalog screen.

    Only id, next, depends_on and allow_cycles drive the graph algorithms;
    the remaining fields are carried for reporting.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    id: str = Field(min_length=1, description="Stable screen identifier")
    route: str | None = Field(default=None, description="Canonical route path")
    title: str | None = Field(default=None, description="Display title")
    next: tuple[str, ...] = Field(default=(), description="Screen ids reachable by navigation")
    depends_on: tuple[str, ...] = Field(
        default=(),
        alias="dependsOn",
        description="External dependency names (APIs, services)",
    )
    allow_cycles: bool = Field(
        default=False,
        alias="allowCycles",
        description="Cycles through this screen are intentional",
    )
    owner: tuple[str, ...] = Field(default=(), description="Owning teams")
