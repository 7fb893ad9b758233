"""
Unit tests for tree lookup, mutation and flattening
"""
import pytest

from dataforge_store.adapters import JsonAdapter, XmlAdapter
from dataforge_store.core.tree_view import TreeView
from dataforge_store.filtering import Filter, Operator


@pytest.fixture
def themes(themes_xml):
    return TreeView(XmlAdapter().parse(themes_xml))


@pytest.fixture
def people(people_json):
    return TreeView(JsonAdapter().parse(people_json))


class TestLookup:
    """Test suite for lookups by tag and path"""

    def test_get_first_in_document_order(self, themes):
        """Test get returns the first node with the tag"""
        assert themes.get("color") == "#000000"
        assert themes.get_all("color") == ["#000000", "#FFFFFF"]
        assert themes.get("missing") is None

    def test_implicit_xpath_equals(self, themes):
        """Test XPath rules resolve the parent location"""
        flt = Filter().add_filter_rule("XPath", "/Themes/theme[@name='Light Theme']")

        assert themes.get("color", flt) == "#FFFFFF"

    def test_implicit_xpath_header_ignores_case(self, themes):
        """Test the implicit header name is case-insensitive"""
        flt = Filter().add_filter_rule("xpath", "theme[@name='Dark Theme']")

        assert themes.get_all("color", flt) == ["#000000"]

    def test_implicit_xpath_other_operators(self, themes):
        """Test non-EQUALS XPath rules compare the parent path as text"""
        flt = Filter().add_filter_rule("XPath", "/Themes/the", Operator.STARTS_WITH)

        assert themes.get_all("color", flt) == ["#000000", "#FFFFFF"]
        assert themes.get_all("theme", flt) == []

    def test_standard_rules_on_attributes_and_children(self, themes):
        """Test standard rules look at attributes and child elements"""
        by_attribute = Filter().add_filter_rule("name", "Dark Theme")
        by_child = Filter().add_filter_rule("color", "#FFFFFF")

        assert len(themes.get_nodes("theme", by_attribute)) == 1
        assert themes.get_nodes("theme", by_child)[0].attributes["name"] == "Light Theme"

    def test_standard_rule_on_sibling(self, people):
        """Test standard rules look at sibling elements"""
        flt = Filter().add_filter_rule("name", "Bob")

        assert people.get("age", flt) == "42"

    def test_standard_and_implicit_combined(self, themes):
        """Test both rule kinds must match"""
        flt = (Filter()
               .add_filter_rule("XPath", "/Themes/theme[@name='Light Theme']")
               .add_filter_rule("color", "#000000"))

        assert themes.get("color", flt) is None

    def test_attributes(self, themes):
        """Test attribute lookups by path"""
        assert themes.get_attribute("/Themes/theme", "name") == "Dark Theme"
        assert themes.get_attributes("theme", "name") == ["Dark Theme", "Light Theme"]
        assert themes.get_attribute("theme", "missing") is None

    def test_get_value_by_path(self, themes):
        """Test text lookup by path and index"""
        assert themes.get_value("theme/color", 1) == "#FFFFFF"
        assert themes.get_value("theme/color", 2) is None


class TestMutation:
    """Test suite for tree mutation"""

    def test_set_value_existing(self, themes):
        """Test setting the text of an existing node"""
        assert themes.set_value("/Themes/theme[@name='Dark Theme']/color", "#111111") == 1
        assert themes.get("color") == "#111111"

    def test_set_value_creates_path(self, themes):
        """Test setting a missing path creates it"""
        themes.set_value("/Themes/theme[@name='Blue Theme']/color", "#0000FF")

        assert themes.get_attributes("theme", "name")[-1] == "Blue Theme"
        assert themes.get_all("color")[-1] == "#0000FF"

    def test_set_value_all_occurrences(self, themes):
        """Test updating every addressed node"""
        assert themes.set_value("theme/color", "x", all_occurrences=True) == 2
        assert themes.get_all("color") == ["x", "x"]

    def test_set_values_replaces_matching_text(self, themes):
        """Test replacing one text by another"""
        assert themes.set_values("theme/color", "#FFFFFF", "#EEEEEE") == 1
        assert themes.get_all("color") == ["#000000", "#EEEEEE"]

    def test_set_value_keeps_scalar_type(self, people):
        """Test numeric JSON values stay numeric when still numeric"""
        people.set_value("people/0/age", 32)
        people.set_value("people/1/age", "unknown")

        nodes = people.resolve("people/age")
        assert [n.scalar_type for n in nodes] == ["int", "str"]

    def test_add(self, themes):
        """Test appending a child, optionally without duplicates"""
        node = themes.add("/Themes", "theme", attributes={"name": "Blue"})

        assert node.parent is themes.root
        assert themes.add("/Themes", "theme", attributes={"name": "Blue"}, no_duplicates=True) is None
        assert len(themes.root.children) == 3

    def test_add_to_sequence(self, people):
        """Test new siblings of array items are array items"""
        node = people.add("/", "people")

        assert node.array_item

    def test_set_attribute(self, themes):
        """Test conditional and unconditional attribute updates"""
        assert themes.set_attribute("theme", "name", "Night", old_value="Dark Theme") == 1
        assert themes.set_attribute("theme", "name", "Day", old_value="Missing") == 0
        assert themes.get_attributes("theme", "name") == ["Night", "Light Theme"]

        themes.set_attribute("/Themes", "version", 2)
        assert themes.root.attributes["version"] == "2"

    def test_delete_children_by_attribute(self, themes):
        """Test deleting children of a path filtered on an attribute"""
        assert themes.delete("/Themes", "theme", "name", "Dark Theme") == 1
        assert themes.get_attributes("theme", "name") == ["Light Theme"]

    def test_delete_nodes_by_path(self, themes):
        """Test deleting all addressed nodes"""
        assert themes.delete("/Themes/theme") == 2
        assert themes.root.children == []

    def test_delete_root_clears_it(self, themes):
        """Test the root is emptied instead of detached"""
        assert themes.delete("/Themes") == 1
        assert themes.root.tag == "Themes"
        assert not themes.root.has_children()

    def test_delete_nodes_by_tag(self, themes):
        """Test deleting every node with a tag"""
        assert themes.delete_nodes("color") == 2
        assert themes.get_all("color") == []


class TestFlatten:
    """Test suite for tabular views of trees"""

    def test_xml_records(self, themes):
        """Test repeated elements become rows"""
        table = themes.flatten()

        assert table.headers.names == ["@name", "color"]
        assert table.rows == [["Dark Theme", "#000000"], ["Light Theme", "#FFFFFF"]]

    def test_json_records_with_repeated_leaves(self, people):
        """Test repeated leaves get suffixed columns"""
        table = people.flatten()

        assert table.headers.names == ["name", "age", "tags", "tags_2"]
        assert table.rows == [["Ann", "31", "", ""], ["Bob", "42", "admin", "ops"]]

    def test_filtered(self, themes):
        """Test flattening only matching records"""
        table = themes.flatten(filter=Filter().add_filter_rule("@name", "Light Theme"))

        assert table.rows == [["Light Theme", "#FFFFFF"]]

    def test_explicit_leaf_records(self, themes):
        """Test leaf records expose their text"""
        table = themes.flatten("/Themes/theme/color")

        assert table.headers.names == ["#text"]
        assert table.rows == [["#000000"], ["#FFFFFF"]]

    def test_flattened_table_is_a_copy(self, themes):
        """Test edits of the table do not reach the tree"""
        table = themes.flatten()
        table.rows[0][1] = "changed"

        assert themes.get("color") == "#000000"
