"""
Tests for the nvm output parser.
"""

from dotsync.core.services.nvm_versions import NodeVersion, parse_nvm_current, parse_nvm_list, strip_ansi

NVM_LIST = """\
->     v18.17.0 *
       v20.5.1 *
         system
default -> 18 (-> v18.17.0)
iojs -> N/A (default)
"""


class TestParseNvmList:
    def test_plain_listing(self):
        versions = parse_nvm_list(NVM_LIST)
        assert [v.value for v in versions] == ["18.17.0", "20.5.1", "system"]

    def test_coloured_listing(self):
        text = "\x1b[0;32m->     v18.17.0 *\x1b[0m\n\x1b[0;34m       v20.5.1 *\x1b[0m\n"
        assert [str(v) for v in parse_nvm_list(text)] == ["18.17.0", "20.5.1"]

    def test_duplicates_dropped_in_order(self):
        text = "       v20.5.1\n->     v18.17.0\n       v20.5.1 *\n"
        assert [v.value for v in parse_nvm_list(text)] == ["20.5.1", "18.17.0"]

    def test_blank_and_na_lines(self):
        assert parse_nvm_list("\n   \nlts/hydrogen -> v18.17.0 (-> N/A)\n") == []

    def test_empty(self):
        assert parse_nvm_list("") == []


class TestNodeVersion:
    def test_str_is_the_bare_version(self):
        assert str(NodeVersion("18.17.0")) == "18.17.0"
        assert str(NodeVersion("system")) == "system"


class TestParseNvmCurrent:
    def test_version(self):
        assert parse_nvm_current("v18.17.0\n") == "v18.17.0"

    def test_none(self):
        assert parse_nvm_current("none\n") is None

    def test_empty(self):
        assert parse_nvm_current("") is None

    def test_strip_ansi(self):
        assert strip_ansi("\x1b[0;32msystem\x1b[0m") == "system"
