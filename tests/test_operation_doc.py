import pytest

from spec_portal.catalog.base import Operation, SpecLocation
from spec_portal.catalog.parser import build_spec_document, parse_spec_text
from spec_portal.generator.operation_doc import render_operation_html

from conftest import CONTENT

PAYMENT_V2 = "en/apispecs/payment-api/v2/payment-openapi.yaml"


@pytest.fixture
def payment_spec():
    document = parse_spec_text((CONTENT / PAYMENT_V2).read_text(encoding="utf-8"), PAYMENT_V2)
    location = SpecLocation(language="en", service="payment-api", version="v2", file_name="payment-openapi.yaml")
    return build_spec_document(document, location, PAYMENT_V2)


def _operation(spec, operation_id):
    return next(op for op in spec.operations if op.operation_id == operation_id)


class TestRenderOperationHtml:
    def test_heading_and_request_line(self, payment_spec):
        html = render_operation_html(_operation(payment_spec, "createPayment"), payment_spec)
        assert html.startswith("<h1>Create payment</h1>")
        assert '<code class="language-http">POST /payments</code>' in html
        assert "<strong>Tags:</strong> payments" in html

    def test_parameters_table(self, payment_spec):
        html = render_operation_html(_operation(payment_spec, "listPayments"), payment_spec)
        assert "<h2>Parameters</h2>" in html
        assert "<td><code>limit</code></td><td><code>integer</code></td><td><code>query</code></td><td>❌</td>" in html
        assert "<td>Page size</td>" in html

    def test_path_level_parameters_included(self, payment_spec):
        html = render_operation_html(_operation(payment_spec, "getPayment"), payment_spec)
        assert "<td><code>paymentId</code></td>" in html
        assert "<td>✅</td>" in html

    def test_request_body_generated_from_schema(self, payment_spec):
        html = render_operation_html(_operation(payment_spec, "createPayment"), payment_spec)
        assert "<h2>Request Body</h2>" in html
        assert "<p>Payment to create</p>" in html
        assert "<h3><code>application/json</code></h3>" in html
        assert "&quot;amount&quot;: 10.5" in html
        assert "&quot;currency&quot;: &quot;AED&quot;" in html

    def test_response_example_preferred(self, payment_spec):
        html = render_operation_html(_operation(payment_spec, "createPayment"), payment_spec)
        assert "<h3>201</h3>" in html
        assert "&quot;status&quot;: &quot;pending&quot;" in html

    def test_response_without_content(self, payment_spec):
        html = render_operation_html(_operation(payment_spec, "getPayment"), payment_spec)
        assert "<h3>404</h3>\n\n<p>Not found</p>" in html

    def test_response_array_schema(self, payment_spec):
        html = render_operation_html(_operation(payment_spec, "listPayments"), payment_spec)
        assert "&quot;createdAt&quot;: &quot;2024-01-01T00:00:00Z&quot;" in html
        assert "&quot;captured&quot;: false" in html

    def test_bare_operation_has_no_sections(self, payment_spec):
        html = render_operation_html(_operation(payment_spec, "get_users_id_orders"), payment_spec)
        assert "<h1>GET /users/{id}/orders</h1>" in html
        assert "<h2>Parameters</h2>" not in html
        assert "<h2>Responses</h2>" not in html

    def test_text_is_escaped(self, payment_spec):
        operation = Operation(
            operation_id="x", method="GET", path="/x", summary="<script>", description="a & b", tags=[]
        )
        html = render_operation_html(operation, payment_spec)
        assert "<h1>&lt;script&gt;</h1>" in html
        assert "<p>a &amp; b</p>" in html
