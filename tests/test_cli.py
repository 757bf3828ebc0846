"""Tests for the command-line interface."""

import json

import httpx
import pytest
from click.testing import CliRunner

from gql_restgen import cli
from gql_restgen.cli import main


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def specs_file(tmp_path, specs):
    path = tmp_path / "resources.json"
    path.write_text(json.dumps({"resources": [spec.model_dump(by_alias=True) for spec in specs]}))
    return path


@pytest.fixture
def data_file(tmp_path, records):
    path = tmp_path / "records.json"
    path.write_text(json.dumps(records))
    return path


# =============================================================================
# sdl
# =============================================================================


class TestSdlCommand:
    """Tests for `gql-restgen sdl`."""

    def test_prints_schema(self, runner, specs_file):
        result = runner.invoke(main, ["sdl", "--specs", str(specs_file)])
        assert result.exit_code == 0, result.output
        assert "type Person {" in result.output
        assert "search(query: String!, limit: Int, offset: Int): SearchResults!" in result.output

    def test_writes_file(self, runner, specs_file, tmp_path):
        output = tmp_path / "out" / "schema.graphql"
        result = runner.invoke(main, ["sdl", "-s", str(specs_file), "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert output.read_text().startswith("enum PersonStatus {")
        assert "Done!" in result.output

    def test_specs_from_environment(self, runner, specs_file):
        result = runner.invoke(main, ["sdl"], env={"GQL_RESTGEN_SPECS": str(specs_file)})
        assert result.exit_code == 0, result.output
        assert "type Household {" in result.output

    def test_missing_specs_file(self, runner, tmp_path):
        result = runner.invoke(main, ["sdl", "--specs", str(tmp_path / "nope.json")])
        assert result.exit_code != 0


# =============================================================================
# query
# =============================================================================


class TestQueryCommand:
    """Tests for `gql-restgen query`."""

    def test_in_memory_query(self, runner, specs_file, data_file):
        result = runner.invoke(main, [
            "query", "-s", str(specs_file), "-d", str(data_file),
            "-q", '{ person(id: "p-1") { id name { lastName } } }',
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"data": {"person": {"id": "p-1", "name": {"lastName": "Lovelace"}}}}

    def test_variables(self, runner, specs_file, data_file):
        result = runner.invoke(main, [
            "query", "-s", str(specs_file), "-d", str(data_file),
            "-q", "query($q: String!) { search(query: $q) { totalCount } }",
            "--variables", '{"q": "turing"}',
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"data": {"search": {"totalCount": 2}}}

    def test_invalid_variables(self, runner, specs_file, data_file):
        result = runner.invoke(main, [
            "query", "-s", str(specs_file), "-d", str(data_file),
            "-q", "{ persons { total } }", "--variables", "{not json",
        ])
        assert result.exit_code == 2
        assert "--variables" in result.output

    def test_needs_exactly_one_store(self, runner, specs_file, data_file):
        result = runner.invoke(main, ["query", "-s", str(specs_file), "-q", "{ persons { total } }"])
        assert result.exit_code == 2
        assert "--data or --store-url" in result.output

        result = runner.invoke(main, [
            "query", "-s", str(specs_file), "-d", str(data_file),
            "--store-url", "http://backend", "-q", "{ persons { total } }",
        ])
        assert result.exit_code == 2

    def test_failed_request_exits_non_zero(self, runner, specs_file, data_file):
        result = runner.invoke(main, ["query", "-s", str(specs_file), "-d", str(data_file), "-q", "{ persons {"])
        assert result.exit_code == 1
        assert json.loads(result.output)["errors"][0]["extensions"]["code"] == "GRAPHQL_PARSE_FAILED"

    def test_no_introspection(self, runner, specs_file, data_file):
        result = runner.invoke(main, [
            "query", "-s", str(specs_file), "-d", str(data_file),
            "-q", "{ __schema { queryType { name } } }", "--no-introspection",
        ])
        assert result.exit_code == 1

    def test_store_url(self, runner, specs_file, monkeypatch):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.url.path == "/persons/p-1"
            return httpx.Response(200, json={"id": "p-1"})

        real_store = cli.HttpResourceStore

        def mock_store(base_url):
            return real_store(base_url, client=httpx.Client(transport=httpx.MockTransport(handler)))

        monkeypatch.setattr(cli, "HttpResourceStore", mock_store)
        result = runner.invoke(main, [
            "query", "-s", str(specs_file), "--store-url", "http://backend",
            "-q", '{ person(id: "p-1") { id } }',
        ])
        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"data": {"person": {"id": "p-1"}}}
