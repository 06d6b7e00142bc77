from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints

Identity = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
FileName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=512)]


class CamelModel(BaseModel):
    """Wire models use camelCase names; Python code may use either."""

    model_config = ConfigDict(populate_by_name=True)


__all__ = ["CamelModel", "FileName", "Identity"]
