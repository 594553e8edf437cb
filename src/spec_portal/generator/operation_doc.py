"""Operation reference renderer: an HTML fragment for one operation of a spec."""

import json
from html import escape
from typing import Any

from spec_portal.catalog.base import ApiSpecDocument, Operation
from spec_portal.catalog.schema import generate_example


def _json_block(value: Any) -> str:
    body = escape(json.dumps(value, indent=2, ensure_ascii=False, default=str))
    return f'<pre><code class="language-json">{body}</code></pre>\n\n'


def _media_examples(content: dict, heading: str, document: dict) -> str:
    html = ""
    for content_type, media_type in content.items():
        html += f"<{heading}><code>{escape(str(content_type))}</code></{heading}>\n\n"
        if not isinstance(media_type, dict):
            continue
        if media_type.get("example") is not None:
            html += _json_block(media_type["example"])
        elif media_type.get("schema"):
            html += _json_block(generate_example(media_type["schema"], document))
    return html


def _parameters_table(parameters: list) -> str:
    rows = []
    for param in parameters:
        if not isinstance(param, dict):
            continue
        schema = param.get("schema") or {}
        rows.append(
            "<tr>"
            f"<td><code>{escape(str(param.get('name', '')))}</code></td>"
            f"<td><code>{escape(str(schema.get('type', 'string')))}</code></td>"
            f"<td><code>{escape(str(param.get('in', '')))}</code></td>"
            f"<td>{'✅' if param.get('required') else '❌'}</td>"
            f"<td>{escape(str(param.get('description', '')))}</td>"
            "</tr>\n"
        )
    if not rows:
        return ""
    return (
        "<h2>Parameters</h2>\n\n<table>\n"
        "<thead><tr><th>Name</th><th>Type</th><th>In</th><th>Required</th><th>Description</th></tr></thead>\n"
        "<tbody>\n" + "".join(rows) + "</tbody></table>\n\n"
    )


def render_operation_html(operation: Operation, spec: ApiSpecDocument) -> str:
    """Render the reference section for one operation.

    Request and response bodies prefer the media type's own ``example`` and
    fall back to an example synthesized from the schema.
    """
    document = spec.raw_document
    path_item = (document.get("paths") or {}).get(operation.path) or {}
    raw = path_item.get(operation.method.lower()) or {}

    html = f"<h1>{escape(operation.summary)}</h1>\n\n"
    if operation.description:
        html += f"<p>{escape(operation.description)}</p>\n\n"
    html += f'<pre><code class="language-http">{operation.method} {escape(operation.path)}</code></pre>\n\n'
    if operation.tags:
        html += f"<p><strong>Tags:</strong> {escape(', '.join(operation.tags))}</p>\n\n"

    html += _parameters_table([*(path_item.get("parameters") or []), *(raw.get("parameters") or [])])

    request_body = raw.get("requestBody")
    if isinstance(request_body, dict):
        html += "<h2>Request Body</h2>\n\n"
        if request_body.get("description"):
            html += f"<p>{escape(str(request_body['description']))}</p>\n\n"
        html += _media_examples(request_body.get("content") or {}, "h3", document)

    responses = raw.get("responses")
    if isinstance(responses, dict):
        html += "<h2>Responses</h2>\n\n"
        for status_code, response in responses.items():
            html += f"<h3>{escape(str(status_code))}</h3>\n\n"
            if not isinstance(response, dict):
                continue
            html += f"<p>{escape(str(response.get('description', '')))}</p>\n\n"
            html += _media_examples(response.get("content") or {}, "h4", document)

    return html
