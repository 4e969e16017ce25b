"""Test JSON loading of analysis results and vulnerabilities."""

import json
from pathlib import Path

import pytest

from codebase_wiki.analysis.owasp import OwaspCategory
from codebase_wiki.analysis.severity import Severity
from codebase_wiki.errors import ConfigurationError, InputUnavailableError
from codebase_wiki.graph.node_types import SymbolKind
from codebase_wiki.loaders import load_analysis, load_vulnerabilities


@pytest.fixture
def write_json(tmp_path):
    def _write(name, data):
        path = tmp_path / name
        path.write_text(json.dumps(data) if not isinstance(data, str) else data)
        return path

    return _write


class TestLoadAnalysis:
    def test_symbols_and_kinds(self, write_json):
        path = write_json(
            "analysis.json",
            {
                "root_path": "/repo",
                "files": [
                    {
                        "path": "src/lib.rs",
                        "language": "rust",
                        "lines": 40,
                        "symbols": [
                            {"name": "parse", "kind": "fn"},
                            {"name": "Token", "kind": "struct_item"},
                            {"name": "weird", "kind": "macro"},
                        ],
                    },
                    {"path": "main.py", "language": "python"},
                ],
            },
        )
        analysis = load_analysis(path)
        assert analysis.root_path == Path("/repo")
        assert analysis.total_files == 2
        assert analysis.total_lines == 40
        kinds = [s.kind for s in analysis.files[0].symbols]
        assert kinds == [SymbolKind.FUNCTION, SymbolKind.STRUCT, SymbolKind.OTHER]
        assert analysis.files[1].symbols == []

    def test_missing_path_is_configuration_error(self, write_json):
        path = write_json("analysis.json", {"files": [{"language": "python"}]})
        with pytest.raises(ConfigurationError):
            load_analysis(path)

    def test_invalid_json(self, write_json):
        path = write_json("analysis.json", "{not json")
        with pytest.raises(ConfigurationError, match="Invalid JSON"):
            load_analysis(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(InputUnavailableError):
            load_analysis(tmp_path / "nope.json")


class TestLoadVulnerabilities:
    def test_bare_list(self, write_json):
        path = write_json(
            "vulns.json",
            [
                {
                    "id": "V1",
                    "title": "SQL injection",
                    "severity": "HIGH",
                    "owasp_category": "A03",
                    "location": {"file": "db.py", "function": "query", "start_line": 7},
                }
            ],
        )
        [vuln] = load_vulnerabilities(path)
        assert vuln.severity == Severity.HIGH
        assert vuln.owasp_category == OwaspCategory.INJECTION
        assert vuln.location.function == "query"
        assert vuln.location.end_line == 7
        assert vuln.location.column == 0

    def test_wrapped_list_and_defaults(self, write_json):
        path = write_json(
            "vulns.json",
            {
                "vulnerabilities": [
                    {
                        "id": "V2",
                        "severity": "low",
                        "location": {"file": "a.py", "function": ""},
                    }
                ]
            },
        )
        [vuln] = load_vulnerabilities(path)
        assert vuln.title == "V2"
        assert vuln.location.function is None
        assert vuln.owasp_category == OwaspCategory.OTHER

    def test_unknown_severity(self, write_json):
        path = write_json(
            "vulns.json",
            [{"id": "V3", "severity": "apocalyptic", "location": {"file": "a.py"}}],
        )
        with pytest.raises(ConfigurationError):
            load_vulnerabilities(path)

    def test_not_a_list(self, write_json):
        path = write_json("vulns.json", {"vulnerabilities": "none"})
        with pytest.raises(ConfigurationError, match="must be a list"):
            load_vulnerabilities(path)
