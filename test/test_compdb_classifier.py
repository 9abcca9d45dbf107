#!/usr/bin/env python3
"""Tests for compdb/classifier.py"""

import pytest

from compdb.classifier import (
    OPTION_TABLES,
    ClassifiedArguments,
    InvocationKind,
    OptionTable,
    classify_arguments,
    effective_kind,
    file_extension,
    is_link_invocation,
    option_name,
    resolve_files,
)
from compdb.constants import OPTIONS_WITH_PARAM

COMPILE = InvocationKind.COMPILE
LINK = InvocationKind.LINK


def compile_sources(tokens: list) -> list:
    return resolve_files(classify_arguments(tokens, COMPILE), COMPILE)


def link_inputs(tokens: list) -> list:
    return resolve_files(classify_arguments(tokens, LINK), LINK)


class TestOptionName:
    """Tests for option_name function."""

    def test_slash_and_dash_prefixes(self) -> None:
        assert option_name("/Zi") == "Zi"
        assert option_name("-Zi") == "Zi"

    def test_plain_token(self) -> None:
        assert option_name("main.cpp") is None
        assert option_name("@args.rsp") is None

    def test_prefix_only(self) -> None:
        assert option_name("/") == ""


class TestOptionsWithParam:
    """Tests for options that consume the following token."""

    @pytest.mark.parametrize("option", OPTIONS_WITH_PARAM)
    def test_parameter_never_a_candidate(self, option: str) -> None:
        """Test that the token after a parameter option is never a file candidate."""
        for prefix in ("/", "-"):
            classified = classify_arguments([f"{prefix}{option}", "param.cpp", "real.cpp"], COMPILE)
            assert classified.candidate_files == ["real.cpp"]

    def test_parameter_that_looks_like_option(self) -> None:
        """Test that the consumed token is skipped even when it is shaped like /Tc."""
        assert compile_sources(["/D", "/Tcx.c", "a.c"]) == ["a.c"]

    def test_attached_parameter_does_not_consume(self) -> None:
        """Test that /DFOO or /I"inc dir" does not consume the next token."""
        assert compile_sources(["/DFOO", "a.c", '/I"inc dir"', "b.cpp"]) == ["a.c", "b.cpp"]

    def test_option_names_are_case_sensitive(self) -> None:
        """Test that /i is not /I."""
        assert compile_sources(["/i", "a.c"]) == ["a.c"]

    def test_parameter_option_at_end(self) -> None:
        """Test parameter option as last token."""
        assert compile_sources(["a.c", "/I"]) == ["a.c"]

    def test_link_uses_same_table(self) -> None:
        """Test that link classification applies the shared parameter table."""
        assert OPTION_TABLES[LINK] is OPTION_TABLES[COMPILE]
        assert link_inputs(["/D", "skipped.obj", "kept.obj"]) == ["kept.obj"]

    def test_custom_table(self) -> None:
        """Test substituting an option table without changing the algorithm."""
        table = OptionTable(frozenset({"LIBPATH"}))
        classified = classify_arguments(["/LIBPATH", "x.lib", "y.lib"], LINK, table)
        assert classified.candidate_files == ["y.lib"]


class TestSourceDesignation:
    """Tests for /Tc, /Tp, /TC and /TP."""

    def test_tc_separate(self) -> None:
        """Test /Tc followed by a file of any extension."""
        assert compile_sources(["/Tc", "foo.bar"]) == ["foo.bar"]

    def test_tc_attached(self) -> None:
        """Test /Tcfoo.bar."""
        assert compile_sources(["/Tcfoo.bar"]) == ["foo.bar"]

    def test_tp_separate_and_attached(self) -> None:
        assert compile_sources(["-Tp", "x.inl", "/Tpy.ipp"]) == ["x.inl", "y.ipp"]

    def test_tc_file_not_duplicated(self) -> None:
        """Test that the /Tc file is not classified again as a candidate."""
        classified = classify_arguments(["/Tc", "foo.c"], COMPILE)
        assert classified.source_files == ["foo.c"]
        assert classified.candidate_files == []
        assert resolve_files(classified, COMPILE) == ["foo.c"]

    def test_tc_at_end(self) -> None:
        """Test /Tc with nothing to consume."""
        assert compile_sources(["a.c", "/Tc"]) == ["a.c"]

    def test_tc_quoted_file(self) -> None:
        """Test that designated files are unquoted."""
        assert compile_sources(['/Tc"my file.x"']) == ["my file.x"]

    def test_all_sources_mode(self) -> None:
        """Test /TC marks every candidate as a source regardless of extension."""
        assert compile_sources(["/TC", "a.xyz", "b.txt"]) == ["a.xyz", "b.txt"]

    def test_all_sources_mode_applies_to_earlier_candidates(self) -> None:
        """Test that /TP after the files still applies."""
        assert compile_sources(["a.xyz", "/TP"]) == ["a.xyz"]

    def test_designated_sources_come_first(self) -> None:
        assert compile_sources(["b.cpp", "/Tca.inc"]) == ["a.inc", "b.cpp"]

    def test_source_options_ignored_for_link(self) -> None:
        """Test that /Tc has no meaning for link invocations."""
        classified = classify_arguments(["/Tc", "a.obj", "/TC"], LINK)
        assert classified.source_files == []
        assert classified.all_sources is False
        assert classified.candidate_files == ["a.obj"]


class TestLinkSwitch:
    """Tests for /link handling."""

    def test_stops_compile_classification(self) -> None:
        """Test that tokens after /link are never sources."""
        classified = classify_arguments(["a.cpp", "/link", "b.cpp", "c.obj"], COMPILE)
        assert classified.candidate_files == ["a.cpp"]
        assert classified.source_files == []

    def test_is_link_invocation(self) -> None:
        assert is_link_invocation(["a.cpp", "/link", "x.obj"])
        assert is_link_invocation(["a.cpp", "-LINK"])
        assert not is_link_invocation(["a.cpp", "/linker", "link"])
        assert not is_link_invocation(["", "a.cpp"])

    def test_any_prefix_character_redirects(self) -> None:
        """Test that the first character of a link token is not checked."""
        assert is_link_invocation(["/c", "a.cpp", "@link"])
        assert is_link_invocation(["xlink"])
        assert is_link_invocation(["#Link"])

    def test_response_file_named_link_redirects_kind(self) -> None:
        """Test that @link turns a compile into a link invocation."""
        assert effective_kind(COMPILE, ["/c", "a.cpp", "@link"]) is LINK
        assert link_inputs(["/c", "a.cpp", "@link", "b.obj"]) == ["b.obj"]

    def test_effective_kind(self) -> None:
        assert effective_kind(COMPILE, ["/c", "a.cpp"]) is COMPILE
        assert effective_kind(COMPILE, ["a.cpp", "/link"]) is LINK
        assert effective_kind(LINK, ["a.obj"]) is LINK

    def test_cl_with_link_classified_as_link(self) -> None:
        """Test that a redirected cl invocation yields its object and library inputs."""
        tokens = ["a.cpp", "b.obj", "/link", "/OUT:app.exe", "user32.lib"]
        kind = effective_kind(COMPILE, tokens)
        assert resolve_files(classify_arguments(tokens, kind), kind) == ["b.obj", "user32.lib"]


class TestResolveFiles:
    """Tests for file role resolution."""

    def test_source_extensions(self) -> None:
        assert compile_sources(["a.c", "b.CPP", "c.cxx", "d.cc", "e.h", "f.obj", "noext"]) == ["a.c", "b.CPP", "c.cxx"]

    def test_options_and_response_files_ignored(self) -> None:
        assert compile_sources(["/c", "-Zi", "@args.rsp", "main.cpp"]) == ["main.cpp"]

    def test_quoted_candidate(self) -> None:
        assert compile_sources(['"my file.cpp"']) == ["my file.cpp"]

    def test_link_extensions(self) -> None:
        assert link_inputs(["/OUT:app.exe", "a.obj", "b.OBJ", "c.lib", "d.dll", "e.res", "f.exp"]) == ["a.obj", "b.OBJ", "c.lib", "d.dll"]

    def test_empty_results(self) -> None:
        assert compile_sources(["/c", "/Zi"]) == []
        assert link_inputs([]) == []

    def test_empty_quoted_candidate_skipped(self) -> None:
        assert compile_sources(["/TC", '""', "a.q"]) == ["a.q"]

    def test_classified_arguments_defaults(self) -> None:
        classified = ClassifiedArguments()
        assert resolve_files(classified, COMPILE) == []


class TestFileExtension:
    """Tests for file_extension function."""

    def test_lowercased(self) -> None:
        assert file_extension("Main.CPP") == "cpp"

    def test_last_dot(self) -> None:
        assert file_extension("archive.tar.gz") == "gz"

    def test_no_dot(self) -> None:
        assert file_extension("Makefile") is None


class TestScenarios:
    """End-to-end classification scenarios."""

    def test_cl_compile(self) -> None:
        assert compile_sources(["/c", "main.cpp", "util.cpp", "/Zi"]) == ["main.cpp", "util.cpp"]

    def test_link(self) -> None:
        assert link_inputs(["/OUT:app.exe", "a.obj", "b.obj", "mylib.lib"]) == ["a.obj", "b.obj", "mylib.lib"]
