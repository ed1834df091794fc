from __future__ import annotations

import datetime
import decimal
import enum
import functools
import json as pyjson
import typing as t

import pydantic as p

JSONPrimitive = str | int | float | bool | None
JSONValue = JSONPrimitive | list["JSONValue"] | dict[str, "JSONValue"]


# encoders
def encode_set(obj: set[t.Any] | frozenset[t.Any]) -> list[t.Any]:
    return sorted(obj) if all(isinstance(o, str) for o in obj) else list(obj)


def encode_timedelta(obj: datetime.timedelta) -> float:
    return obj.total_seconds()


def encode_pydantic(obj: p.BaseModel) -> dict[str, JSONValue]:
    return obj.model_dump(mode="json")


@functools.cache
def _encoder_map() -> dict[type, t.Callable[[t.Any], JSONValue]]:
    return {
        datetime.datetime: datetime.datetime.isoformat,
        datetime.timedelta: encode_timedelta,
        decimal.Decimal: str,
        enum.Enum: lambda o: o.value,
        set: encode_set,
        frozenset: encode_set,
    }


class JSONEncoder(pyjson.JSONEncoder):
    """Encodes the values quizgate models and log records carry: times, grades, enums and models."""

    def get_encoders(self) -> dict[type, t.Callable[[t.Any], JSONValue]]:
        return _encoder_map()

    def default(self, o: t.Any) -> JSONValue:
        if isinstance(o, p.BaseModel):
            return encode_pydantic(o)

        encoders = self.get_encoders()
        for tp, encoder in encoders.items():
            if isinstance(o, tp):
                return encoder(o)

        return pyjson.JSONEncoder.default(self, o)
