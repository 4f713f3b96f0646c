"""Tests for Maven coordinate parsing and path building."""

import pytest

from errors import InputFormatError
from pom.dependency import Dependency


class TestDependencyFromString:
    """Tests for parsing group:artifact:version text."""

    def test_three_fields(self):
        dep = Dependency.from_string("org.slf4j:slf4j-api:1.7.36")
        assert dep.group_id == "org.slf4j"
        assert dep.artifact_id == "slf4j-api"
        assert dep.version == "1.7.36"
        assert dep.scope == ""
        assert dep.optional is False
        assert dep.transitive is False

    def test_strips_whitespace_and_newline(self):
        dep = Dependency.from_string("  g:a:1.0\n")
        assert dep.id() == "g:a:1.0"

    def test_extra_fields_are_ignored(self):
        dep = Dependency.from_string("g:a:1.0:jar:sources")
        assert dep.id() == "g:a:1.0"

    @pytest.mark.parametrize("text", ["", "g", "g:a", "just-garbage"])
    def test_too_few_fields_raise(self, text):
        with pytest.raises(InputFormatError):
            Dependency.from_string(text)

    def test_empty_version_field_is_accepted(self):
        dep = Dependency.from_string("g:a:")
        assert dep.version == ""
        assert not dep.has_version()


class TestHasVersion:
    """Tests for deciding whether metadata must be consulted."""

    @pytest.mark.parametrize("version", ["1.0", "[1.0,2.0]", "2.0-SNAPSHOT"])
    def test_concrete_versions(self, version):
        assert Dependency("g", "a", version).has_version()

    @pytest.mark.parametrize("version", ["", "unspecified", "${project.version}", "${lib.version}"])
    def test_unknown_versions(self, version):
        assert not Dependency("g", "a", version).has_version()


class TestGetVersion:
    """Tests for the range heuristic."""

    def test_plain_version(self):
        assert Dependency("g", "a", "1.2.3").get_version() == "1.2.3"

    def test_range_takes_highest_token(self):
        assert Dependency("g", "a", "[1.0.0,1.0.9]").get_version() == "1.0.9"

    def test_range_is_lexicographic(self):
        # String ordering, not version ordering: "2.9" sorts after "2.10".
        assert Dependency("g", "a", "[2.9,2.10]").get_version() == "2.9"

    def test_open_ended_range(self):
        assert Dependency("g", "a", "[1.5,)").get_version() == "1.5"

    def test_single_version_in_brackets(self):
        assert Dependency("g", "a", "[3.0]").get_version() == "3.0"


class TestPaths:
    """Tests for repository path construction."""

    def test_meta_path(self):
        dep = Dependency("org.apache.commons", "commons-lang3", "")
        assert dep.get_meta_path() == "org/apache/commons/commons-lang3/maven-metadata.xml"

    def test_pom_path(self):
        dep = Dependency("org.apache.commons", "commons-lang3", "3.12.0")
        assert dep.get_pom_path() == (
            "org/apache/commons/commons-lang3/3.12.0/commons-lang3-3.12.0.pom"
        )

    def test_pom_path_uses_range_heuristic(self):
        dep = Dependency("com.example", "lib", "[1.0,1.1]")
        assert dep.get_pom_path() == "com/example/lib/1.1/lib-1.1.pom"


class TestIdentity:
    """Tests for the deduplication key."""

    def test_id_ignores_scope_and_flags(self):
        a = Dependency("g", "a", "1.0", scope="test", optional=True)
        b = Dependency("g", "a", "1.0", scope="compile", transitive=True)
        assert a.id() == b.id() == "g:a:1.0"

    def test_id_of_range_uses_picked_version(self):
        assert Dependency("g", "a", "[1.0,1.1]").id() == "g:a:1.1"

    def test_id_of_unknown_version_keeps_raw_value(self):
        assert Dependency("g", "a", "${x}").id() == "g:a:${x}"

    def test_str(self):
        assert str(Dependency("g", "a", "1.0", scope="test")) == "<Dep ID=g:a:1.0 O=False S=test >"
