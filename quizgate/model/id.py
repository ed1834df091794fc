from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p
import pydantic_core.core_schema as core_schema
import shortuuid

KEY_LENGTH: t.Final[int] = 22


class ShortUUIDKey(str):
    """A prefixed shortuuid, e.g. ``asmt$Dx8UkMoJ4f3pKtU6RNSGuV``.

    Stored without its prefix (see `quizgate.storage.type.ShortUUIDKeyType`),
    rendered with it everywhere else.
    """

    prefix: t.ClassVar[str]
    separator: t.ClassVar[str]

    @p.validate_call
    def __init_subclass__(cls, prefix: t.Annotated[str, ant.Len(4)], separator: t.Annotated[str, ant.Len(1)] = "$"):
        super.__init_subclass__()
        cls.prefix = prefix
        cls.separator = separator

    def __new__(cls, s: str | None = None, /, key: str | None = None) -> t.Self:
        """
        s is a complete, prefixed key and is validated
        key is the bare shortuuid part and is trusted (fast path for rows
            coming back from storage)
        with neither, a fresh key is generated
        """
        if key is None:
            if s is None:
                key = shortuuid.uuid()
            else:
                key = cls.parse(s)
        return super().__new__(cls, cls.separator.join((cls.prefix, key)))

    @classmethod
    def parse(cls, s: str) -> str:
        head = cls.prefix + cls.separator
        if not s.startswith(head):
            raise ValueError(f"invalid {cls.__name__}: key must begin with {cls.prefix}")
        key = s[len(head) :]
        if len(key) != KEY_LENGTH:
            raise ValueError(f"invalid {cls.__name__}: key must have length {KEY_LENGTH}")
        alphabet = shortuuid.get_alphabet()
        if any(c not in alphabet for c in key):
            raise ValueError(f"invalid {cls.__name__}: key must comprise only {alphabet}")
        return key

    @classmethod
    def validate_str(cls, v: str | None, _: p.ValidationInfo) -> ShortUUIDKey | None:
        return cls(v) if v is not None else v

    @classmethod
    def __get_pydantic_json_schema__(cls, src: t.Any, handler: p.GetJsonSchemaHandler) -> p.json_schema.JsonSchemaValue:
        return {"type": "string"}

    @classmethod
    def __get_pydantic_core_schema__(cls, src: t.Any, handler: p.GetCoreSchemaHandler) -> core_schema.CoreSchema:
        from_str = core_schema.with_info_after_validator_function(cls.validate_str, schema=core_schema.str_schema())
        return core_schema.json_or_python_schema(
            json_schema=from_str,
            python_schema=core_schema.union_schema([core_schema.is_instance_schema(cls), from_str]),
            serialization=core_schema.plain_serializer_function_ser_schema(cls.__str__),
        )

    @property
    def key(self) -> str:
        return self[len(self.prefix) + len(self.separator) :]

    def __hash__(self) -> int:
        return str.__hash__(self)

    def __str__(self) -> str:
        return str.__str__(self)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.key!s}>"


# fmt: off
class UserID(ShortUUIDKey, prefix="user"): ...
class AssessmentID(ShortUUIDKey, prefix="asmt"): ...
class AttemptID(ShortUUIDKey, prefix="atmp"): ...
class AccessOverrideID(ShortUUIDKey, prefix="axov"): ...
class GradeOverrideID(ShortUUIDKey, prefix="grov"): ...
class AuditEventID(ShortUUIDKey, prefix="audt"): ...
# fmt: on
