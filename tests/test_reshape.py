# SPDX-License-Identifier: AGPL-3.0-only

import pytest
from unittest.mock import Mock

from common.errors import (
    ErrorKind,
    NoDataFound,
    ReshapeFailure,
    UnrecoverableFormat,
    UpstreamFailure,
)
from ocr.models import ReshapeRequest, TargetShape
from ocr.prompt_pack import TABLE_SYSTEM_PROMPT
from ocr.reshape import ReshapeService


def _client(text=None, side_effect=None):
    client = Mock()
    if side_effect is not None:
        client.call.side_effect = side_effect
    else:
        client.call.return_value = {"text": text, "tokens": 10, "cost": 0.0}
    return client


class TestReshapeTable:
    """Test suite for the tabular reshape."""

    def _service(self, answer=None, side_effect=None):
        return ReshapeService(html_client=_client("<p></p>"), table_client=_client(answer, side_effect))

    def test_wrapped_table(self, sample_ocr_text):
        service = self._service('{"table":[{"a":"1"}]}')
        assert service.to_table(sample_ocr_text) == [{"a": "1"}]

    def test_bare_array_same_as_wrapped(self, sample_ocr_text):
        wrapped = self._service('{"table":[{"a":"1"}]}').to_table(sample_ocr_text)
        bare = self._service('[{"a":"1"}]').to_table(sample_ocr_text)
        assert bare == wrapped

    def test_single_object_becomes_one_row(self, sample_ocr_text):
        service = self._service('{"Name": "Apples", "Qty": "3"}')
        assert service.to_table(sample_ocr_text) == [{"Name": "Apples", "Qty": "3"}]

    def test_empty_table_is_no_data(self, sample_ocr_text):
        with pytest.raises(NoDataFound) as exc_info:
            self._service('{"table":[]}').to_table(sample_ocr_text)
        assert exc_info.value.kind == ErrorKind.NO_DATA_FOUND
        assert exc_info.value.status_code == 400

    def test_empty_answer_is_no_data(self, sample_ocr_text):
        with pytest.raises(NoDataFound):
            self._service("   ").to_table(sample_ocr_text)

    def test_fenced_answer_with_prose(self, sample_ocr_text):
        answer = 'Here you go:\n```json\n{"table": [{"Name": "Pears", "Qty": 5,}]}\n```'
        rows = self._service(answer).to_table(sample_ocr_text)
        assert rows == [{"Name": "Pears", "Qty": "5"}]

    def test_values_become_strings(self, sample_ocr_text):
        answer = '{"table":[{"Qty": 3, "Price": 1.2, "Note": null, "Paid": true}]}'
        rows = self._service(answer).to_table(sample_ocr_text)
        assert rows == [{"Qty": "3", "Price": "1.2", "Note": "", "Paid": "True"}]

    def test_non_object_rows_dropped(self, sample_ocr_text):
        answer = '{"table":[{"a":"1"}, "junk", {}, {"a":"2"}]}'
        assert self._service(answer).to_table(sample_ocr_text) == [{"a": "1"}, {"a": "2"}]

    def test_unparseable_answer(self, sample_ocr_text):
        with pytest.raises(UnrecoverableFormat):
            self._service("I could not find a table in this text.").to_table(sample_ocr_text)

    def test_scalar_answer(self, sample_ocr_text):
        with pytest.raises(UnrecoverableFormat):
            self._service("42").to_table(sample_ocr_text)

    def test_uses_system_prompt_and_low_temperature(self, sample_ocr_text):
        service = self._service('[{"a":"1"}]')
        service.to_table(sample_ocr_text)

        args, kwargs = service.table_client.call.call_args
        assert sample_ocr_text in args[0]
        assert kwargs["system_prompt"] == TABLE_SYSTEM_PROMPT
        assert kwargs["temperature"] == 0.05
        assert kwargs["max_tokens"] == 8192

    def test_remote_failure_becomes_reshape_failure(self, sample_ocr_text):
        cause = UpstreamFailure("LLM call failed after 3 attempts: 503", timed_out=True)
        service = self._service(side_effect=cause)

        with pytest.raises(ReshapeFailure) as exc_info:
            service.to_table(sample_ocr_text)
        assert exc_info.value.timed_out
        assert exc_info.value.status_code == 504
        assert "503" in exc_info.value.message


class TestReshapeHtml:
    """Test suite for the HTML reshape."""

    def test_strips_html_fences(self):
        html_client = _client("```html\n<h1>Title</h1>\n<p>Body</p>\n```")
        service = ReshapeService(html_client=html_client, table_client=_client("[]"))

        assert service.to_html("Title\nBody") == "<h1>Title</h1>\n<p>Body</p>"

    def test_prompt_contains_source_text(self):
        html_client = _client("<p>x</p>")
        service = ReshapeService(html_client=html_client, table_client=_client("[]"), html_max_tokens=100)

        service.to_html("UNIQUE OCR TEXT")

        args, kwargs = html_client.call.call_args
        assert "UNIQUE OCR TEXT" in args[0]
        assert kwargs["max_tokens"] == 100
        assert kwargs["temperature"] == 0.1

    def test_reshape_dispatch(self):
        service = ReshapeService(html_client=_client("<p>x</p>"), table_client=_client('[{"a":"1"}]'))

        html = service.reshape(ReshapeRequest(source_text="x", target_shape=TargetShape.HTML))
        table = service.reshape(ReshapeRequest(source_text="x", target_shape=TargetShape.TABULAR_JSON))

        assert html.kind == TargetShape.HTML and html.markup == "<p>x</p>"
        assert table.kind == TargetShape.TABULAR_JSON and table.rows == [{"a": "1"}]


class TestRowsFromEnvelope:
    """Test envelope normalization."""

    @pytest.mark.parametrize("parsed,expected", [
        ({"table": [{"a": "1"}]}, [{"a": "1"}]),
        ([{"a": "1"}], [{"a": "1"}]),
        ({"a": "1"}, [{"a": "1"}]),
        ({"table": {"a": "1"}}, [{"a": "1"}]),
        ({"table": None}, []),
        ([], []),
    ])
    def test_shapes(self, parsed, expected):
        assert ReshapeService.rows_from_envelope(parsed) == expected

    def test_table_not_a_list(self):
        with pytest.raises(UnrecoverableFormat):
            ReshapeService.rows_from_envelope({"table": "a,b,c"})
