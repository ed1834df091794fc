import typing as t

from pydantic_settings import BaseSettings as PydanticBaseSettings

from quizgate.model import BaseModel


class BaseSettings(PydanticBaseSettings, BaseModel):  # pyright: ignore [reportIncompatibleVariableOverride]
    # BaseModel comes second so its by_alias=True model_dump wins over the
    # pydantic-settings default
    def __init__(self, cf: dict[str, t.Any] | None = None, **kwargs: t.Any):
        # specifically allow initialization with a dict
        if cf is not None:
            kwargs = {**cf, **kwargs}
        super().__init__(**kwargs)
