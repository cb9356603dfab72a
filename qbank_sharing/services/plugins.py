"""
Activity plugin definitions and the plugin-type registry.

The registry classifies question-using activity types as shareable (they
publish their questions for reuse) or private. It is built once when the
application starts and handed to every service that needs it.
"""
import enum
import logging
from dataclasses import dataclass, field
from typing import Dict, FrozenSet, List, Optional, Sequence, Type

from sqlalchemy import select
from sqlalchemy.orm import Session

from qbank_sharing.core.exceptions import InvalidPluginTypeError
from qbank_sharing.models.orm import Base, Module, Page, Qbank, Quiz

logger = logging.getLogger(__name__)


class Feature(str, enum.Enum):
    """Plugin capability flags."""
    USES_QUESTIONS = "uses_questions"
    PUBLISHES_QUESTIONS = "publishes_questions"
    CAN_DISPLAY = "can_display"


class PluginType(str, enum.Enum):
    SHARED = "shared"
    PRIVATE = "private"


@dataclass(frozen=True)
class PluginDefinition:
    name: str
    instance_model: Type[Base]
    features: FrozenSet[Feature] = field(default_factory=frozenset)

    def supports(self, feature: Feature) -> bool:
        return feature in self.features


DEFAULT_PLUGINS: Sequence[PluginDefinition] = (
    PluginDefinition("qbank", Qbank, frozenset({Feature.USES_QUESTIONS, Feature.PUBLISHES_QUESTIONS})),
    PluginDefinition("quiz", Quiz, frozenset({Feature.USES_QUESTIONS, Feature.CAN_DISPLAY})),
    PluginDefinition("page", Page, frozenset({Feature.CAN_DISPLAY})),
)


class PluginTypeRegistry:
    def __init__(self, plugins: Sequence[PluginDefinition], module_ids: Dict[str, int]):
        self._plugins = {p.name: p for p in plugins}
        self._module_ids = dict(module_ids)
        uses = [p for p in plugins if p.supports(Feature.USES_QUESTIONS)]
        self._shared = [p.name for p in uses if p.supports(Feature.PUBLISHES_QUESTIONS)]
        self._private = [p.name for p in uses if not p.supports(Feature.PUBLISHES_QUESTIONS)]

    @classmethod
    def build(cls, db: Session, plugins: Sequence[PluginDefinition] = DEFAULT_PLUGINS) -> "PluginTypeRegistry":
        """Register any missing plugins in the modules table and snapshot their ids."""
        rows = {m.name: m for m in db.scalars(select(Module)).all()}
        for plugin in plugins:
            if plugin.name not in rows:
                module = Module(name=plugin.name, visible=1)
                db.add(module); db.flush()
                rows[plugin.name] = module
        db.commit()
        registry = cls(
            plugins,
            {name: m.id for name, m in rows.items() if name in {p.name for p in plugins}},
        )
        logger.info("Plugin registry built: shared=%s private=%s", registry.shareable_types(), registry.private_types())
        return registry

    def shareable_types(self) -> List[str]:
        return list(self._shared)

    def private_types(self) -> List[str]:
        return list(self._private)

    def types_of(self, plugin_type: str) -> List[str]:
        if plugin_type == PluginType.SHARED:
            return self.shareable_types()
        if plugin_type == PluginType.PRIVATE:
            return self.private_types()
        raise InvalidPluginTypeError(plugin_type)

    def plugin(self, name: str) -> Optional[PluginDefinition]:
        return self._plugins.get(name)

    def names(self) -> List[str]:
        return list(self._plugins)

    def module_id(self, name: str) -> int:
        return self._module_ids[name]

    def name_for_module_id(self, module_id: int) -> Optional[str]:
        for name, mid in self._module_ids.items():
            if mid == module_id:
                return name
        return None

    def instance_model(self, name: str) -> Type[Base]:
        return self._plugins[name].instance_model
