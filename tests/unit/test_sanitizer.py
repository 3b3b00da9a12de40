"""
Unit Tests for the Response Sanitizer

Test Coverage:
- Fenced and bare JSON answers
- Prose around the JSON object
- Double-encoded answers (escaped quotes/newlines)
- Comma repair
- Empty and unparseable output
- Idempotency on its own output
"""

import json
from datetime import datetime, timezone

import pytest

from document_classifier import ExtractedDocument, SanitizeStatus, sanitize
from document_classifier.sanitizer import repair_json_text


# =============================================================================
# Test: Well-formed Answers
# =============================================================================

class TestWellFormed:
    """Answers that parse once fences and prose are removed."""

    @pytest.mark.unit
    def test_fenced_json(self, sample_model_answer):
        """SAN-001: ```json fences are stripped."""
        document = sanitize(sample_model_answer)

        assert document == {"tipo": "CNH", "nome": "Ana"}
        assert document.status == SanitizeStatus.PARSED
        assert document.recovered is True

    @pytest.mark.unit
    def test_bare_json(self):
        """Plain JSON parses unchanged."""
        assert sanitize('{"tipo": "RG", "numero": "12.345.678-9"}') == {
            "tipo": "RG",
            "numero": "12.345.678-9",
        }

    @pytest.mark.unit
    @pytest.mark.parametrize("fence", ["```", "```JSON", "```javascript"])
    def test_other_fences(self, fence):
        """Any fence language tag is removed."""
        document = sanitize(f'{fence}\n{{"tipo": "CPF"}}\n```')

        assert document == {"tipo": "CPF"}

    @pytest.mark.unit
    def test_prose_around_object(self):
        """Text before the first brace and after the last brace is dropped."""
        raw = 'Aqui está o resultado:\n{"tipo": "Certidão de nascimento"}\nEspero ter ajudado!'

        assert sanitize(raw) == {"tipo": "Certidão de nascimento"}

    @pytest.mark.unit
    def test_nested_values(self):
        """Nested objects and arrays are kept as-is."""
        raw = '{"tipo": "RG", "filiacao": {"pai": "José", "mae": "Maria"}, "vias": [1, 2]}'

        document = sanitize(raw)

        assert document["filiacao"] == {"pai": "José", "mae": "Maria"}
        assert document["vias"] == [1, 2]

    @pytest.mark.unit
    def test_legitimate_escapes_are_preserved(self):
        """Valid JSON escapes inside strings are decoded, not mangled."""
        raw = r'{"endereco": "Rua A, 10\nApto 2", "apelido": "\"Zé\""}'

        document = sanitize(raw)

        assert document["endereco"] == "Rua A, 10\nApto 2"
        assert document["apelido"] == '"Zé"'

    @pytest.mark.unit
    def test_raw_control_characters_in_strings(self):
        """Literal newlines inside string values are tolerated."""
        raw = '{"observacao": "linha 1\nlinha 2"}'

        assert sanitize(raw) == {"observacao": "linha 1\nlinha 2"}


# =============================================================================
# Test: Double-encoded Answers
# =============================================================================

class TestDoubleEncoded:
    """Answers whose quotes and newlines arrive escaped."""

    @pytest.mark.unit
    def test_escaped_quotes(self):
        """SAN-002: \\" sequences become plain quotes."""
        raw = r'{\"tipo\": \"CPF\", \"numero\": \"123.456.789-00\"}'

        document = sanitize(raw)

        assert document == {"tipo": "CPF", "numero": "123.456.789-00"}
        assert document.status == SanitizeStatus.PARSED

    @pytest.mark.unit
    def test_escaped_newlines(self):
        """Literal \\n between tokens is treated as whitespace."""
        raw = r'```json\n{\n  \"tipo\": \"CNH\",\n  \"categoria\": \"B\"\n}\n```'

        assert sanitize(raw) == {"tipo": "CNH", "categoria": "B"}

    @pytest.mark.unit
    def test_json_string_literal(self):
        """A JSON-encoded string holding the object is unwrapped."""
        raw = json.dumps(json.dumps({"tipo": "RG", "nome": "Ana"}))

        assert sanitize(raw) == {"tipo": "RG", "nome": "Ana"}

    @pytest.mark.unit
    def test_stray_backslashes_removed(self):
        """Invalid escapes are dropped as a last resort."""
        raw = r'{"tipo": "Contrato", "arquivo": "C:\pasta\contrato"}'

        document = sanitize(raw)

        assert document == {"tipo": "Contrato", "arquivo": "C:pastacontrato"}
        assert document.status == SanitizeStatus.UNESCAPED


# =============================================================================
# Test: Repair
# =============================================================================

class TestRepair:
    """Slightly malformed objects."""

    @pytest.mark.unit
    def test_trailing_comma(self):
        """SAN-003: Trailing commas are removed."""
        document = sanitize('{"tipo": "CNH",\n"nome": "Ana",}')

        assert document == {"tipo": "CNH", "nome": "Ana"}
        assert document.status == SanitizeStatus.REPAIRED

    @pytest.mark.unit
    def test_missing_comma_between_properties(self):
        """A property split from the next only by a newline gets a comma."""
        document = sanitize('{\n"tipo": "CNH"\n"validade": "2030-01-01"\n}')

        assert document == {"tipo": "CNH", "validade": "2030-01-01"}
        assert document.status == SanitizeStatus.REPAIRED

    @pytest.mark.unit
    def test_missing_and_trailing_commas(self):
        """Both defects in one answer."""
        raw = '{\n"tipo": "RG"\n"digitos": 9\n"ativo": true,\n}'

        assert sanitize(raw) == {"tipo": "RG", "digitos": 9, "ativo": True}

    @pytest.mark.unit
    def test_repair_json_text_returns_original_when_hopeless(self):
        """Unrepairable text is returned unchanged."""
        text = '{"tipo": CNH sem aspas}'

        assert repair_json_text(text) == text

    @pytest.mark.unit
    def test_repair_json_text_leaves_valid_json(self):
        """Valid JSON needs no strategy."""
        text = '{"a": 1, "b": [1, 2]}'

        assert repair_json_text(text) == text


# =============================================================================
# Test: Unusable Output
# =============================================================================

class TestUnusableOutput:
    """Empty and unparseable answers still produce a mapping."""

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", [None, "", "   ", "\n\t"])
    def test_empty(self, raw):
        """SAN-004: Blank output yields the error mapping."""
        document = sanitize(raw)

        assert document == {"error": "empty response"}
        assert document.status == SanitizeStatus.EMPTY
        assert document.recovered is False

    @pytest.mark.unit
    def test_no_braces(self):
        """SAN-005: Output without an object is unidentified."""
        document = sanitize("  Não foi possível identificar o documento.  ")

        assert document["document_type"] == "unidentified"
        assert document["raw_text"] == "Não foi possível identificar o documento."
        assert document["note"]
        assert "timestamp" in document
        assert document.status == SanitizeStatus.UNIDENTIFIED

    @pytest.mark.unit
    def test_broken_object(self):
        """Braces around garbage are unidentified, raw text kept."""
        raw = '{"tipo": CNH sem aspas}'

        document = sanitize(raw)

        assert document["document_type"] == "unidentified"
        assert document["raw_text"] == raw

    @pytest.mark.unit
    @pytest.mark.parametrize("raw", ["[1, 2, 3]", '"CNH"', "42", "null", "true"])
    def test_non_object_json(self, raw):
        """JSON that is not an object is not a document."""
        document = sanitize(raw)

        assert document["document_type"] == "unidentified"

    @pytest.mark.unit
    def test_deep_nesting_does_not_raise(self):
        """Pathological nesting ends as unidentified instead of an error."""
        raw = '{"a": ' + "[" * 100000 + "]" * 100000 + "}"

        document = sanitize(raw)

        assert isinstance(document, ExtractedDocument)

    @pytest.mark.unit
    def test_unidentified_timestamp(self):
        """Timestamp is an ISO-8601 UTC string."""
        now = datetime(2024, 5, 17, 12, 30, tzinfo=timezone.utc)

        document = ExtractedDocument.unidentified("texto", now=now)

        assert document["timestamp"] == "2024-05-17T12:30:00+00:00"


# =============================================================================
# Test: Idempotency
# =============================================================================

class TestIdempotency:
    """Sanitizing serialized output yields the same mapping."""

    @pytest.mark.unit
    @pytest.mark.parametrize(
        "raw",
        [
            '```json\n{"tipo": "CNH", "nome": "Ana"}\n```',
            r'{"endereco": "Rua A\nCasa 2", "obs": "aspas \"duplas\""}',
            r'{\"tipo\": \"CPF\"}',
            '{"tipo": "CNH",}',
            "sem json aqui",
            "",
        ],
    )
    def test_sanitize_is_idempotent(self, raw):
        """SAN-006: sanitize(json(sanitize(x))) == sanitize(x)."""
        first = sanitize(raw)

        second = sanitize(json.dumps(first, ensure_ascii=False))

        assert second == first
