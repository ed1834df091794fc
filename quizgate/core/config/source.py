import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource
from pydantic_settings import SettingsError

from quizgate.model import DeploymentEnvironment

# init kwargs that steer loading rather than being loaded
SKIP_KEYS: t.Final[frozenset[str]] = frozenset({"env", "root", "override"})


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]
    override: t.Required[tuple[str, ...]]


class SettingsSource(PydanticBaseSettingsSource):
    @property
    def state(self) -> CurrentState:
        return t.cast(CurrentState, self.current_state)

    def __call__(self) -> dict[str, t.Any]:
        data: dict[str, t.Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            try:
                field_value, field_key, value_is_complex = self.get_field_value(field, field_name)
                field_value = self.prepare_field_value(field_name, field, field_value, value_is_complex)
            except KeyError:
                continue
            except ValueError as e:
                raise SettingsError(f"error parsing value for field {field_name!r} from source {self!r}") from e

            data[field_key] = field_value
        return data


class YAMLCascadingSettingsSource(SettingsSource):
    """One YAML file per top-level field, e.g. ``logging.yaml``.

    ``<root>/env.d/<env>/`` is searched after ``<root>``; the last file found wins.
    """

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        root = self.state["root"]
        assert root.scheme == "file" and root.path is not None, "root is not a legible location of YAML files"
        env = self.state["env"]
        paths = [Path(root.path)]
        if env is not DeploymentEnvironment.Local:
            # local/ has no directory of its own, it is just the root
            paths.append(Path(root.path) / "env.d" / env.value)
        return paths

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in SKIP_KEYS:
            raise KeyError(field_name)
        files = (path / f"{field_name}.yaml" for path in self.load_paths)
        yamls = [fn.read_text(encoding="utf8") for fn in files if fn.exists()]
        if not yamls:
            raise KeyError(field_name)
        return yamls, field_name, True

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        if not isinstance(value, list):
            raise ValueError(field_name)
        return yaml.safe_load(t.cast(list[str], value)[-1])


class OverrideSettingsSource(SettingsSource):
    """Apply ``-o dotted.path=value`` overrides; values are parsed as YAML.

    Must come ahead of the YAML source, since earlier sources win when merged.
    """

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        od: dict[str, t.Any] = {}
        for o in self.state["override"]:
            k, v = [s.strip() for s in o.split("=", 1)]
            *path, key = k.split(".")
            target = od
            for part in path:
                target = target.setdefault(part, {})
            target[key] = yaml.safe_load(v)
        return od

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in SKIP_KEYS or field_name not in self.parsed_options:
            raise KeyError(field_name)
        return self.parsed_options[field_name], field_name, True

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value
