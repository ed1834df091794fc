import datetime
import typing as t

import pydantic as p
from pydantic.main import IncEx


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Read a naive datetime as UTC; convert an aware one to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.UTC)
    return value.astimezone(datetime.UTC)


UTCDateTime = t.Annotated[datetime.datetime, p.AfterValidator(as_utc)]


class BaseModel(p.BaseModel):
    def model_dump(
        self,
        *,
        mode: t.Literal["json", "python"] | str = "python",
        include: IncEx | None = None,
        exclude: IncEx | None = None,
        context: t.Any | None = None,
        by_alias: bool = True,
        exclude_unset: bool = False,
        exclude_defaults: bool = False,
        exclude_none: bool = False,
        round_trip: bool = False,
        warnings: bool | t.Literal["none", "warn", "error"] = True,
        serialize_as_any: bool = False,
    ) -> dict[str, t.Any]:
        # aliases are the wire names, so dump with them unless told otherwise
        return super().model_dump(
            mode=mode,
            include=include,
            exclude=exclude,
            context=context,
            by_alias=by_alias,
            exclude_unset=exclude_unset,
            exclude_defaults=exclude_defaults,
            exclude_none=exclude_none,
            round_trip=round_trip,
            warnings=warnings,
            serialize_as_any=serialize_as_any,
        )


class FrozenModel(BaseModel):
    """Value object: hashable and never mutated after construction.

    Use `model_copy(update=...)` to derive a changed instance.
    """

    model_config = p.ConfigDict(frozen=True)


class WithCtime(BaseModel):
    create_time: UTCDateTime


class WithTimestamps(WithCtime):
    update_time: UTCDateTime
