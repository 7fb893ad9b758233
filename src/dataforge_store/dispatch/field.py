"""
Dispatch Field - A named value at a templated location of a container.

A field reads and writes through the container of its registry. Tree
containers address the nodes named like the field under the resolved
template path; tabular containers (properties, delimited text) use the
column named like the field and ignore the template.

Usage:
    theme_color = registry["THEME_COLOR"]
    theme_color.get_value("Dark Theme")
    theme_color.set_value("#101010", "Dark Theme")
"""

import logging
from typing import List, Optional

from .template import Params, PathTemplate
from ..constants import IMPLICIT_XPATH
from ..filtering import Filter

logger = logging.getLogger(__name__)


class DispatchField:
    """
    A field declared by a FieldSchema and bound to a DispatchRegistry.

    Args:
        registry: Owning registry (provides the container)
        key: Identifier of the field within its schema
        name: Node tag or column name holding the value
        template: Path of the parent nodes (empty for the document root)
        default: Value returned while the container holds none
    """

    def __init__(self, registry, key: str, name: str, template: PathTemplate, default: Optional[str] = ""):
        self.registry = registry
        self.key = key
        self.name = name
        self.template = template
        self.default = default

    @property
    def container(self):
        return self.registry.container

    # ==================== Paths ====================

    def parent_path(self, params: Params = None, attributes: Params = None) -> str:
        return self.template.resolve(params, attributes)

    def node_path(self, params: Params = None, attributes: Params = None) -> str:
        parent = self.parent_path(params, attributes)
        return f"{parent.rstrip('/')}/{self.name}" if parent else self.name

    def _location_filter(self, params: Params, attributes: Params) -> Filter:
        location = Filter()
        parent = self.parent_path(params, attributes)
        if parent:
            location.add_filter_rule(IMPLICIT_XPATH, parent)
        return location

    def _ensure_column(self):
        if self.container.get_header_index(self.name) < 0:
            self.container.add_column(self.name)

    # ==================== Read ====================

    def get_values(self, params: Params = None, attributes: Params = None) -> List[str]:
        """
        All values stored for the field.

        Args:
            params: Values for the template's {param_N} placeholders
            attributes: Names for the template's {attribute_N} placeholders

        Returns:
            The values in document order (empty when there are none)

        Raises:
            MissingParameterError: If the template is under-supplied
        """
        container = self.container
        if container.is_tabular:
            return container.get_values_as_list(self.name)
        values = container.get_all(self.name, self._location_filter(params, attributes))
        return ["" if v is None else v for v in values]

    def get_value(self, params: Params = None, attributes: Params = None, index: int = 0) -> Optional[str]:
        """
        The value at a position (first by default), or the field default
        when the container holds none.
        """
        values = self.get_values(params, attributes)
        if 0 <= index < len(values):
            return values[index]
        return self.default

    def get_attribute(self, attr_name: str, params: Params = None, attributes: Params = None) -> Optional[str]:
        """Attribute of the first node of the field, None when absent."""
        return self.container.get_attribute(self.node_path(params, attributes), attr_name)

    def get_attributes(self, attr_name: str, params: Params = None, attributes: Params = None) -> List[str]:
        return self.container.get_attributes(self.node_path(params, attributes), attr_name)

    # ==================== Write ====================

    def set_value(self, value, params: Params = None, attributes: Params = None) -> int:
        """
        Overwrite the first value of the field, creating the node or column
        when missing.

        Returns:
            Number of updated values
        """
        container = self.container
        if container.is_tabular:
            self._ensure_column()
            return container.set_value(self.name, value)
        return container.set(self.node_path(params, attributes), value)

    def set_values(self, old_value: str, new_value, all_occurrences: bool = False,
                   params: Params = None, attributes: Params = None) -> int:
        """
        Replace values equal to old_value (first one, or all of them).

        Returns:
            Number of replaced values
        """
        container = self.container
        if container.is_tabular:
            if container.get_header_index(self.name) < 0:
                return 0
            matching = Filter().add_filter_rule(self.name, old_value)
            return container.set_value(self.name, new_value, matching, all_occurrences)
        return container.tree.set_values(self.node_path(params, attributes), old_value, new_value, all_occurrences)

    def add_value(self, value, params: Params = None, attributes: Params = None,
                  no_duplicates: bool = False) -> bool:
        """
        Add another value of the field (a new node or row).

        Args:
            value: The value
            params: Template parameters
            attributes: Template attribute names
            no_duplicates: Skip when the value already exists at that place

        Returns:
            True if the value was added
        """
        container = self.container
        if container.is_tabular:
            self._ensure_column()
            if no_duplicates and str(value) in container.get_values_as_list(self.name):
                return False
            container.add_row(container.create_prepared_row(f"{self.name}={value}"))
            return True
        return container.add(self.parent_path(params, attributes), self.name, value,
                             no_duplicates=no_duplicates) is not None

    def set_attribute(self, attr_name: str, value, params: Params = None, attributes: Params = None,
                      old_value: Optional[str] = None) -> int:
        """
        Set an attribute on the field's node (created when missing). With
        old_value only a node whose attribute equals it is changed.
        """
        return self.container.set_attribute(self.node_path(params, attributes), attr_name, value, old_value)

    def delete(self, params: Params = None, attributes: Params = None,
               attr_name: Optional[str] = None, attr_value: Optional[str] = None) -> int:
        """
        Delete the field's nodes (trees) or clear its cells (tables).

        Args:
            params: Template parameters
            attributes: Template attribute names
            attr_name: Only delete nodes having this attribute
            attr_value: ...with this value

        Returns:
            Number of deleted nodes or cleared cells
        """
        container = self.container
        if container.is_tabular:
            if container.get_header_index(self.name) < 0:
                return 0
            return container.set_value(self.name, "", Filter(), all_occurrences=True)
        parent = self.parent_path(params, attributes)
        if not parent and attr_name is None:
            return container.tree.delete_nodes(self.name)
        return container.delete(parent or "/", self.name, attr_name, attr_value)

    def __repr__(self) -> str:
        return f"DispatchField({self.key!r}, name={self.name!r}, template={self.template.template!r})"
