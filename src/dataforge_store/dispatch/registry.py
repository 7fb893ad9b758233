"""
Dispatch Registry - Field schemas and the container they are bound to.

A FieldSchema declares fields once as (key, name, template, default).
A DispatchRegistry binds a schema to one container at a time; every field
of the registry reads and writes through that container. Until a container
is bound the registry works on a private in-memory one, so fields return
their defaults and writes are kept in memory.

Usage:
    schema = (FieldSchema("AppSettings")
              .add("LOGFILE", "Logfile", "/AppSettings", "./logs/Application.log")
              .add("THEME_COLOR", "color", "/AppSettings/Themes/theme[@name='{param_1}']"))

    settings = DispatchRegistry(schema)
    settings.bind_file("conf/settings.xml")
    settings["LOGFILE"].get_value()
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from .field import DispatchField
from .template import PathTemplate
from ..adapters.factory import AdapterFactory
from ..core.container import DataContainer
from ..core.model import TreeNode
from ..exceptions import TemplateError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FieldDefinition:
    """Declaration of one field."""
    key: str
    name: str
    template: PathTemplate
    default: Optional[str] = ""


class FieldSchema:
    """
    Ordered set of field declarations with a common root node.

    Args:
        name: Identity of the schema (used in log messages)

    Raises:
        TemplateError: From add() when a template is malformed, names
            another root node, or the key is already declared
    """

    def __init__(self, name: str):
        self.name = name
        self._definitions: Dict[str, FieldDefinition] = {}
        self.root_tag: Optional[str] = None

    def add(self, key: str, name: Optional[str] = None, template: str = "",
            default: Optional[str] = "") -> 'FieldSchema':
        """
        Declare a field.

        Args:
            key: Identifier of the field
            name: Node tag / column name (defaults to the key)
            template: Parent path template, empty for the document root
            default: Value returned while the container holds none

        Returns:
            self, for chaining
        """
        if key in self._definitions:
            raise TemplateError(f"Field {key} declared twice in schema {self.name}")
        path_template = PathTemplate(template)
        root = path_template.root_tag
        if root is not None:
            if self.root_tag is None:
                self.root_tag = root
            elif root != self.root_tag:
                raise TemplateError(
                    f"Field {key} of schema {self.name} uses root <{root}>, expected <{self.root_tag}>")
        self._definitions[key] = FieldDefinition(key, name or key, path_template, default)
        return self

    def get(self, key: str) -> Optional[FieldDefinition]:
        return self._definitions.get(key)

    @property
    def keys(self) -> List[str]:
        return list(self._definitions)

    def __iter__(self) -> Iterator[FieldDefinition]:
        return iter(self._definitions.values())

    def __len__(self) -> int:
        return len(self._definitions)

    def __contains__(self, key) -> bool:
        return key in self._definitions


class DispatchRegistry:
    """
    Fields of a schema bound to a container.

    Args:
        schema: The field declarations
        container: Optional container to bind right away
    """

    def __init__(self, schema: FieldSchema, container: Optional[DataContainer] = None):
        self.schema = schema
        self._bound: Optional[DataContainer] = None
        self._private: Optional[DataContainer] = None
        self._fields: Dict[str, DispatchField] = {
            definition.key: DispatchField(self, definition.key, definition.name,
                                          definition.template, definition.default)
            for definition in schema
        }
        if container is not None:
            self.bind(container)

    # ==================== Fields ====================

    def field(self, key: str) -> DispatchField:
        """
        Get a field by key.

        Raises:
            KeyError: If the schema does not declare the key
        """
        return self._fields[key]

    def find_field(self, key: str) -> Optional[DispatchField]:
        """Field whose key or name equals the given one ignoring case."""
        lowered = key.lower()
        for field in self._fields.values():
            if field.key.lower() == lowered:
                return field
        for field in self._fields.values():
            if field.name.lower() == lowered:
                return field
        return None

    @property
    def fields(self) -> List[DispatchField]:
        return list(self._fields.values())

    def __getitem__(self, key: str) -> DispatchField:
        return self.field(key)

    def __iter__(self) -> Iterator[DispatchField]:
        return iter(self._fields.values())

    def __contains__(self, key) -> bool:
        return key in self._fields

    # ==================== Binding ====================

    @property
    def is_bound(self) -> bool:
        return self._bound is not None

    @property
    def container(self) -> DataContainer:
        """The bound container, or the private in-memory one."""
        if self._bound is not None:
            return self._bound
        if self._private is None:
            self._private = self._new_container()
            logger.debug(f"Created in-memory container for schema {self.schema.name}")
        return self._private

    def _new_container(self) -> DataContainer:
        if self.schema.root_tag:
            return DataContainer.empty("xml", root=self.schema.root_tag)
        return DataContainer.empty("properties")

    def check_root(self, container: DataContainer):
        """
        Check that a tree container has the schema's root node. A tree
        without named root and without content gets it (XML only).

        Raises:
            TemplateError: If the container has another root node
        """
        if not container.is_tree or not self.schema.root_tag:
            return
        model = container.model
        if model.is_anonymous:
            if container.format_name == "xml" and not model.root.has_children():
                model.root = TreeNode(self.schema.root_tag)
            return
        if model.root.tag != self.schema.root_tag:
            raise TemplateError(f"Root node <{model.root.tag}> of {container.source_path or 'container'} "
                                f"does not match schema {self.schema.name} root <{self.schema.root_tag}>")

    def bind(self, container: DataContainer):
        """
        Bind a container; all fields switch to it at once.

        Raises:
            TemplateError: If the container's root node does not fit the schema
        """
        self.check_root(container)
        self._bound = container
        logger.info(f"Bound schema {self.schema.name} to {container!r}")

    def bind_file(self, path: Union[str, Path], create: bool = True, **options) -> DataContainer:
        """
        Bind the container of a file.

        Args:
            path: Backing file
            create: Create a new file holding the schema's root node when
                the file does not exist
            **options: Read options (see DataContainer.from_file)

        Returns:
            The bound container

        Raises:
            DataIOError: If the file does not exist and create is False
        """
        path = Path(path)
        if not path.exists() and create:
            container = self._new_file_container(path)
            container.create_file()
            logger.info(f"Created {path} for schema {self.schema.name}")
        else:
            container = DataContainer.from_file(path, **options)
        self.bind(container)
        return container

    def _new_file_container(self, path: Path) -> DataContainer:
        format_name = AdapterFactory.format_for_path(path) or ("xml" if self.schema.root_tag else "properties")
        container = DataContainer.empty(format_name, root=self.schema.root_tag)
        container.source_path = path
        return container

    def unbind(self):
        """Drop the binding; fields fall back to the private container."""
        self._bound = None

    def reset(self):
        """Drop the binding and the private container."""
        self._bound = None
        self._private = None

    def save(self) -> Path:
        """Write the bound container back to its file."""
        return self.container.save()

    def __repr__(self) -> str:
        return f"DispatchRegistry(schema={self.schema.name!r}, fields={len(self._fields)}, bound={self.is_bound})"
