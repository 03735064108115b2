import json

from scripts.generate_openapi import write_schema


def test_schema_lists_public_endpoints(tmp_path):
    output = tmp_path / "api" / "openapi.json"

    schema = write_schema(str(output))

    assert json.loads(output.read_text(encoding="utf-8")) == schema
    assert schema["info"]["title"] == "LTI Code Execution API"
    assert set(schema["paths"]) >= {
        "/api/execute",
        "/api/languages",
        "/api/passbacks/{submission_token}",
        "/lti/launch",
        "/health",
    }
    assert set(schema["paths"]["/lti/launch"]) == {"get", "post"}
