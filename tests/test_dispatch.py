"""
Unit tests for path templates, field schemas and dispatch registries
"""
import pytest

from dataforge_store.core.container import DataContainer
from dataforge_store.dispatch import (
    DispatchRegistry, FieldSchema, PathTemplate, bootstrap_settings, fill_defaults, parse_args,
)
from dataforge_store.exceptions import DataIOError, MissingParameterError, TemplateError

RULE_TEMPLATE = "/Rules/rule[@name='{param_1}']/filter[@{attribute_1}='{param_2}']"


@pytest.fixture
def theme_schema():
    return (FieldSchema("Themes")
            .add("THEME", "theme", "/Themes")
            .add("THEME_COLOR", "color", "/Themes/theme[@name='{param_1}']", "#808080")
            .add("THEME_COLOR_BY", "color", "/Themes/theme[@{attribute_1}='{param_1}']"))


@pytest.fixture
def themes(theme_schema, themes_xml):
    """Registry bound to the themes document"""
    return DispatchRegistry(theme_schema, DataContainer.from_string(themes_xml, "xml"))


@pytest.fixture
def settings_schema():
    return (FieldSchema("AppSettings")
            .add("LOGFILE", "Logfile", "/AppSettings", "./logs/app.log")
            .add("USER", "User", "/AppSettings"))


@pytest.fixture
def runtime_schema():
    return FieldSchema("Runtime").add("SETTINGSFILE").add("LOGFILE").add("USER")


class TestPathTemplate:
    """Test suite for PathTemplate"""

    def test_counts(self):
        """Test placeholder counting"""
        template = PathTemplate(RULE_TEMPLATE)

        assert template.param_count == 2
        assert template.attribute_count == 1
        assert template.has_placeholders
        assert not PathTemplate("/a/b").has_placeholders

    def test_resolve(self):
        """Test params and attribute names are substituted separately"""
        template = PathTemplate(RULE_TEMPLATE)

        assert template.resolve(["r1", "f1"], ["id"]) == "/Rules/rule[@name='r1']/filter[@id='f1']"

    def test_single_string_is_one_param(self):
        """Test a plain string counts as one parameter"""
        template = PathTemplate("/Themes/theme[@name='{param_1}']")

        assert template.resolve("Dark Theme") == template.resolve(["Dark Theme"])

    def test_value_with_quote(self):
        """Test values holding a quote are re-quoted"""
        template = PathTemplate("/People/person[@name='{param_1}']")

        assert template.resolve("O'Brien") == "/People/person[@name=\"O'Brien\"]"
        with pytest.raises(TemplateError):
            template.resolve("say \"O'Brien\"")

    def test_no_params_drops_predicates(self):
        """Test resolving without values addresses every node of that shape"""
        assert PathTemplate(RULE_TEMPLATE).resolve() == "/Rules/rule/filter"

    def test_placeholder_outside_predicate_needs_value(self):
        """Test placeholders in element names cannot be dropped"""
        with pytest.raises(MissingParameterError):
            PathTemplate("/Rules/{param_1}/x").resolve()

    def test_partial_values(self):
        """Test too few values"""
        with pytest.raises(MissingParameterError):
            PathTemplate(RULE_TEMPLATE).resolve(["r1"], ["id"])
        with pytest.raises(MissingParameterError):
            PathTemplate(RULE_TEMPLATE).resolve(["r1", "f1"])

    @pytest.mark.parametrize("template", [
        "/a[@b='{foo}']",
        "/a/{param_0}",
        "/a/b}",
        "/a/{b",
        "/a[",
    ])
    def test_malformed(self, template):
        """Test malformed templates fail at construction"""
        with pytest.raises(TemplateError):
            PathTemplate(template)

    @pytest.mark.parametrize("template,expected", [
        ("/Themes/theme", "Themes"),
        ("/Themes[@v='1']/theme", "Themes"),
        ("theme/color", None),
        ("/{param_1}/x", None),
        ("", None),
    ])
    def test_root_tag(self, template, expected):
        """Test the root element named by absolute templates"""
        assert PathTemplate(template).root_tag == expected


class TestFieldSchema:
    """Test suite for FieldSchema"""

    def test_declarations(self, theme_schema):
        """Test keys, names and the common root"""
        assert theme_schema.keys == ["THEME", "THEME_COLOR", "THEME_COLOR_BY"]
        assert theme_schema.root_tag == "Themes"
        assert theme_schema.get("THEME_COLOR").name == "color"
        assert FieldSchema("S").add("KEY").get("KEY").name == "KEY"
        assert "THEME" in theme_schema
        assert len(theme_schema) == 3

    def test_duplicate_key(self):
        """Test a key cannot be declared twice"""
        with pytest.raises(TemplateError):
            FieldSchema("S").add("A").add("A")

    def test_root_mismatch(self):
        """Test all absolute templates share the root"""
        with pytest.raises(TemplateError):
            FieldSchema("S").add("A", "a", "/Root").add("B", "b", "/Other")


class TestTreeFields:
    """Test suite for fields bound to tree containers"""

    def test_get_value_with_param(self, themes):
        """Test reading a value at a parameterized location"""
        assert themes["THEME_COLOR"].get_value("Dark Theme") == "#000000"
        assert themes["THEME_COLOR"].get_value("Light Theme") == "#FFFFFF"

    def test_get_values_without_params(self, themes):
        """Test dropped predicates address every theme"""
        assert themes["THEME_COLOR"].get_values() == ["#000000", "#FFFFFF"]

    def test_default_when_missing(self, themes):
        """Test the default of a field without value"""
        assert themes["THEME_COLOR"].get_value("Blue Theme") == "#808080"

    def test_attribute_placeholder(self, themes):
        """Test attribute names given separately from values"""
        assert themes["THEME_COLOR_BY"].get_value("Light Theme", "name") == "#FFFFFF"

    def test_set_value(self, themes):
        """Test writing an existing and a new location"""
        color = themes["THEME_COLOR"]

        color.set_value("#101010", "Dark Theme")
        color.set_value("#0000FF", "Blue Theme")

        assert color.get_value("Dark Theme") == "#101010"
        assert color.get_value("Blue Theme") == "#0000FF"
        assert themes["THEME"].get_attributes("name") == ["Dark Theme", "Light Theme", "Blue Theme"]

    def test_param_with_quote(self, themes):
        """Test a location named by a value holding a single quote"""
        color = themes["THEME_COLOR"]

        color.set_value("#00FF00", "Bob's Theme")

        assert color.get_value("Bob's Theme") == "#00FF00"
        assert color.get_value("Dark Theme") == "#000000"
        assert themes["THEME"].get_attributes("name") == ["Dark Theme", "Light Theme", "Bob's Theme"]

    def test_set_values(self, themes):
        """Test replacing a value by another"""
        assert themes["THEME_COLOR"].set_values("#000000", "#010101", params="Dark Theme") == 1
        assert themes["THEME_COLOR"].get_value("Dark Theme") == "#010101"

    def test_add_value(self, themes):
        """Test adding another value, optionally without duplicates"""
        color = themes["THEME_COLOR"]

        assert color.add_value("#222222", "Dark Theme")
        assert not color.add_value("#222222", "Dark Theme", no_duplicates=True)
        assert color.get_values("Dark Theme") == ["#000000", "#222222"]
        assert color.get_value("Dark Theme", index=1) == "#222222"

    def test_attributes(self, themes):
        """Test reading and changing attributes of field nodes"""
        theme = themes["THEME"]

        assert theme.get_attribute("name") == "Dark Theme"
        assert theme.set_attribute("name", "Night", old_value="Dark Theme") == 1
        assert theme.get_attributes("name") == ["Night", "Light Theme"]

    def test_delete_at_location(self, themes):
        """Test deleting the nodes under one parameterized parent"""
        color = themes["THEME_COLOR"]

        assert color.delete("Light Theme") == 1
        assert color.get_value("Light Theme") == "#808080"
        assert color.get_value("Dark Theme") == "#000000"

    def test_delete_by_attribute(self, themes):
        """Test deleting nodes with a given attribute value"""
        assert themes["THEME"].delete(attr_name="name", attr_value="Dark Theme") == 1
        assert themes["THEME"].get_attributes("name") == ["Light Theme"]

    def test_delete_everywhere(self, themes_xml):
        """Test a field without template deletes every node with its name"""
        registry = DispatchRegistry(FieldSchema("S").add("COLOR", "color"),
                                    DataContainer.from_string(themes_xml, "xml"))

        assert registry["COLOR"].delete() == 2
        assert registry["COLOR"].get_values() == []


class TestTabularFields:
    """Test suite for fields bound to tables"""

    @pytest.fixture
    def db(self):
        schema = FieldSchema("Db").add("HOST", "host").add("PORT", "port", default="5432")
        return DispatchRegistry(schema, DataContainer.from_string("host = db\n", "properties"))

    def test_read_column_named_like_field(self, db):
        """Test fields use the column of their name"""
        assert db["HOST"].get_value() == "db"
        assert db["PORT"].get_value() == "5432"

    def test_write_creates_column(self, db):
        """Test writing a missing column"""
        db["PORT"].set_value(6543)

        assert db.container.as_string() == "host = db\nport = 6543\n"

    def test_set_values(self, db):
        """Test replacing matching cells"""
        assert db["HOST"].set_values("db", "db2") == 1
        assert db["HOST"].set_values("missing", "x") == 0
        assert db["PORT"].set_values("1", "2") == 0

    def test_delete_clears_cells(self, db):
        """Test deleting a tabular field empties its cells"""
        assert db["HOST"].delete() == 1
        assert db["HOST"].get_value() == ""
        assert db["PORT"].delete() == 0

    def test_add_value_adds_rows(self):
        """Test each added value is a new row"""
        registry = DispatchRegistry(FieldSchema("L").add("NAME", "name"), DataContainer.from_headers(["name"]))

        assert registry["NAME"].add_value("a")
        assert not registry["NAME"].add_value("a", no_duplicates=True)
        assert registry["NAME"].add_value("b")
        assert registry["NAME"].get_values() == ["a", "b"]


class TestRegistry:
    """Test suite for DispatchRegistry binding"""

    def test_field_lookup(self, themes):
        """Test lookups by key and case-insensitive key or name"""
        assert themes.field("THEME").name == "theme"
        assert themes.find_field("theme_color").key == "THEME_COLOR"
        assert themes.find_field("COLOR").key == "THEME_COLOR"
        assert themes.find_field("missing") is None
        assert "THEME" in themes
        assert len(themes.fields) == 3
        with pytest.raises(KeyError):
            themes.field("MISSING")

    def test_unbound_registry_returns_defaults(self, theme_schema):
        """Test an unbound registry works in memory"""
        registry = DispatchRegistry(theme_schema)

        assert not registry.is_bound
        assert registry["THEME_COLOR"].get_value("Dark Theme") == "#808080"

        registry["THEME_COLOR"].set_value("#000001", "Dark Theme")
        assert registry["THEME_COLOR"].get_value("Dark Theme") == "#000001"
        assert registry.container.tree.root.tag == "Themes"

    def test_unbound_registry_without_root_uses_table(self):
        """Test schemas without absolute templates keep values in a table"""
        registry = DispatchRegistry(FieldSchema("S").add("A"))

        registry["A"].set_value("1")

        assert registry.container.is_tabular
        assert registry["A"].get_value() == "1"

    def test_bind_switches_all_fields(self, theme_schema, themes_xml):
        """Test binding, unbinding and reset"""
        registry = DispatchRegistry(theme_schema)
        registry["THEME_COLOR"].set_value("#000001", "Dark Theme")

        registry.bind(DataContainer.from_string(themes_xml, "xml"))
        assert registry.is_bound
        assert registry["THEME_COLOR"].get_value("Dark Theme") == "#000000"

        registry.unbind()
        assert registry["THEME_COLOR"].get_value("Dark Theme") == "#000001"

        registry.reset()
        assert registry["THEME_COLOR"].get_value("Dark Theme") == "#808080"

    def test_root_mismatch(self, theme_schema):
        """Test binding a document with another root node"""
        registry = DispatchRegistry(theme_schema)

        with pytest.raises(TemplateError):
            registry.bind(DataContainer.from_string("<Other/>", "xml"))
        assert not registry.is_bound

    def test_empty_xml_gets_schema_root(self, theme_schema):
        """Test an empty anonymous XML tree receives the root node"""
        container = DataContainer.empty("xml")

        DispatchRegistry(theme_schema, container)

        assert container.tree.root.tag == "Themes"

    def test_anonymous_json_root_is_kept(self, theme_schema):
        """Test JSON documents keep their anonymous root"""
        container = DataContainer.from_string('{"theme": []}', "json")

        DispatchRegistry(theme_schema, container)

        assert container.tree.root.tag == ""

    def test_bind_existing_file(self, theme_schema, data_dir):
        """Test reading, editing and saving through a bound file"""
        registry = DispatchRegistry(theme_schema)
        registry.bind_file(data_dir / "themes.xml")

        registry["THEME_COLOR"].set_value("#222222", "Light Theme")
        registry.save()

        reloaded = DataContainer.from_file(data_dir / "themes.xml")
        assert reloaded.get_all("color") == ["#000000", "#222222"]

    def test_bind_file_creates_xml(self, settings_schema, tmp_path):
        """Test a missing file is created with the schema root"""
        path = tmp_path / "conf" / "settings.xml"
        registry = DispatchRegistry(settings_schema)

        registry.bind_file(path)
        registry["LOGFILE"].set_value("x.log")
        registry.save()

        reloaded = DataContainer.from_file(path)
        assert reloaded.tree.root.tag == "AppSettings"
        assert reloaded.get("Logfile") == "x.log"

    def test_bind_file_creates_properties(self, tmp_path):
        """Test a missing properties file is created empty"""
        path = tmp_path / "db.properties"
        registry = DispatchRegistry(FieldSchema("Db").add("HOST", "host"))

        registry.bind_file(path)
        assert path.exists()

        registry["HOST"].set_value("x")
        registry.save()
        assert path.read_text(encoding="utf-8") == "host = x\n"

    def test_bind_missing_file_without_create(self, settings_schema, tmp_path):
        """Test a missing file is an error when it may not be created"""
        with pytest.raises(DataIOError):
            DispatchRegistry(settings_schema).bind_file(tmp_path / "missing.xml", create=False)

    def test_save_unbound(self, settings_schema):
        """Test saving without a file"""
        with pytest.raises(DataIOError):
            DispatchRegistry(settings_schema).save()


class TestSettingsBootstrap:
    """Test suite for runtime settings initialisation"""

    def test_parse_args(self):
        """Test name=value arguments"""
        values = parse_args(["-SETTINGSFILE=conf/a.xml", "--user=bob", "verbose", "x=a=b"])

        assert values == {"SETTINGSFILE": "conf/a.xml", "user": "bob", "x": "a=b"}

    def test_bootstrap_from_existing_file(self, runtime_schema, settings_schema, tmp_path):
        """Test startup values win and the settings file fills the rest"""
        path = tmp_path / "settings.xml"
        path.write_text("<AppSettings><Logfile>/var/log/app.log</Logfile><User>admin</User></AppSettings>",
                        encoding="utf-8")
        runtime = DispatchRegistry(runtime_schema)
        settings = DispatchRegistry(settings_schema)

        filled = bootstrap_settings(runtime, settings, {"SETTINGSFILE": str(path), "user": "bob"})

        assert filled == ["LOGFILE"]
        assert runtime["LOGFILE"].get_value() == "/var/log/app.log"
        assert runtime["USER"].get_value() == "bob"
        assert settings.is_bound

    def test_bootstrap_creates_settings_file(self, runtime_schema, settings_schema, tmp_path):
        """Test a missing settings file is created and defaults are copied"""
        path = tmp_path / "new.xml"
        runtime = DispatchRegistry(runtime_schema)
        settings = DispatchRegistry(settings_schema)

        bootstrap_settings(runtime, settings, {"settingsfile": str(path)}, create=True)

        assert path.exists()
        assert runtime["LOGFILE"].get_value() == "./logs/app.log"

    def test_bootstrap_missing_file(self, runtime_schema, settings_schema, tmp_path):
        """Test a missing settings file without create"""
        with pytest.raises(DataIOError):
            bootstrap_settings(DispatchRegistry(runtime_schema), DispatchRegistry(settings_schema),
                               {"SETTINGSFILE": str(tmp_path / "missing.xml")})

    def test_fill_defaults_copies_once(self, runtime_schema, settings_schema):
        """Test later settings changes are not propagated"""
        runtime = DispatchRegistry(runtime_schema)
        settings = DispatchRegistry(settings_schema)
        settings["USER"].set_value("admin")

        assert fill_defaults(runtime, settings) == ["LOGFILE", "USER"]

        settings["USER"].set_value("root")
        assert runtime["USER"].get_value() == "admin"
