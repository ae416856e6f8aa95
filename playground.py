"""
shapegraph playground — Interactive web UI for transforming SHACL schemas.

Run with: uv run python playground.py
"""

from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel

from shapegraph.backends.pg_json import schema_to_dict
from shapegraph.pipeline import run_pipeline
from shapegraph.runner import render_artifacts
from shapegraph.validator import violations

app = FastAPI()
templates = Jinja2Templates(directory=Path(__file__).parent / "templates")

EXAMPLE_SHACL = """\
@prefix schema: <http://schema.org/> .
@prefix sh:     <http://www.w3.org/ns/shacl#> .
@prefix xsd:    <http://www.w3.org/2001/XMLSchema#> .

schema:PersonShape
    a sh:NodeShape ;
    sh:targetClass schema:Person ;
    sh:property [ sh:path schema:givenName ; sh:datatype xsd:string ; sh:minCount 1 ] ;
    sh:property [ sh:path schema:birthDate ; sh:datatype xsd:date ; sh:maxCount 1 ] ;
    sh:property [
        sh:path schema:memberOf ;
        sh:class schema:Organization ;
        sh:minCount 0 ;
        sh:property [ sh:path schema:role ; sh:datatype xsd:string ; sh:minCount 1 ]
    ] .

schema:OrganizationShape
    a sh:NodeShape ;
    sh:targetClass schema:Organization ;
    sh:property [ sh:path schema:name ; sh:datatype xsd:string ; sh:minCount 1 ] .
"""


class TransformRequest(BaseModel):
    schema_text: str


class ValidateRequest(BaseModel):
    schema_text: str
    label: str
    instance: dict = {}


@app.post("/api/transform")
def transform(req: TransformRequest):
    try:
        result = run_pipeline(req.schema_text, source_name="<playground>")
        artifacts = render_artifacts(result)
        return {
            "ok": True,
            "pg_schema": schema_to_dict(result.pg_schema),
            "cypher": artifacts["cypher"],
            "turtle": artifacts["turtle"],
            "dot": artifacts["dot"],
            "facts": len(result.statements),
        }
    except Exception as e:
        return {"ok": False, "error": f"{type(e).__name__}: {e}"}


@app.post("/api/validate")
def validate(req: ValidateRequest):
    try:
        result = run_pipeline(req.schema_text, source_name="<playground>")
        node = result.pg_schema.find_by_label(req.label)
        if node is None:
            return {"ok": False, "error": f"Unknown label {req.label!r}"}
        problems = violations(node, req.instance)
        return {"ok": True, "valid": not problems, "violations": problems}
    except Exception as e:
        return {"ok": False, "error": f"{type(e).__name__}: {e}"}


@app.get("/", response_class=HTMLResponse)
def index(request: Request):
    return templates.TemplateResponse(
        request,
        "playground.html",
        {"example_shacl": EXAMPLE_SHACL},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="127.0.0.1", port=8420)
